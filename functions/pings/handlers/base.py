"""
Request/handler plumbing shared by all resource handlers.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from pings.config import Settings
from pings.dependencies import Gateways
from pings.responses import ApiError, HandlerResponse, ValidationFailed, failure

logger = logging.getLogger(__name__)


@dataclass
class HandlerRequest:
    """Framework-neutral view of one HTTP request."""

    method: str
    raw_body: Optional[Union[str, bytes]] = None
    query: dict = field(default_factory=dict)
    path_params: dict = field(default_factory=dict)

    def json(self) -> dict:
        if not self.raw_body:
            return {}
        try:
            payload = json.loads(self.raw_body)
        except ValueError:
            raise ValidationFailed("Invalid JSON body") from None
        if not isinstance(payload, dict):
            raise ValidationFailed("Invalid JSON body")
        return payload


class BaseHandler:
    """
    One stateless resource handler. Operations are methods taking a
    HandlerRequest and returning a HandlerResponse; ``handle`` maps raised
    errors onto responses.
    """

    name = "base"
    failure_message = "Failed to process request"

    def __init__(self, settings: Settings, gateways: Gateways):
        self.settings = settings
        self.store = gateways.store
        self.blobs = gateways.blobs
        self.notifier = gateways.notifier

    def handle(self, operation: str, request: HandlerRequest) -> HandlerResponse:
        try:
            return getattr(self, operation)(request)
        except ApiError as exc:
            logger.info("%s rejected (%d): %s", self.name, exc.status_code, exc.message)
            return exc.as_response()
        except Exception:
            logger.exception("%s error", self.name)
            return failure(self.failure_message)
