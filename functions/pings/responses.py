"""
Outcome types shared by every handler and both entry surfaces.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional

JSON_HEADERS = {"Content-Type": "application/json"}


class ApiError(Exception):
    """An expected failure that maps onto a client-facing status code."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_response(self) -> "HandlerResponse":
        return HandlerResponse(self.status_code, {"error": self.message})


class ValidationFailed(ApiError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class MethodNotAllowed(ApiError):
    status_code = 405
    default_message = "Method not allowed"


@dataclass
class HandlerResponse:
    status_code: int
    body: dict = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(self.body, ensure_ascii=False)


def ok(body: dict) -> HandlerResponse:
    return HandlerResponse(200, body)


def created(body: dict) -> HandlerResponse:
    return HandlerResponse(201, body)


def failure(message: str) -> HandlerResponse:
    return HandlerResponse(500, {"error": message})
