"""
API Gateway (REST, proxy integration) entry point.

Each deployed function can point at ``pings.lambda_handler.handler``; the
event's resource path selects the handler through the shared route table.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional

from pings.config import get_settings
from pings.dependencies import get_gateways
from pings.handlers import HandlerRequest
from pings.responses import JSON_HEADERS, ApiError, HandlerResponse
from pings.routes import Dispatcher

logger = logging.getLogger(__name__)

_dispatcher: Dispatcher | None = None


def get_dispatcher() -> Dispatcher:
    """Build the dispatcher once per warm container."""
    global _dispatcher
    if _dispatcher:
        return _dispatcher
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    _dispatcher = Dispatcher(settings, get_gateways())
    return _dispatcher


def _event_body(event: dict) -> Optional[bytes | str]:
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body


def handle_event(event: dict, dispatcher: Dispatcher) -> dict:
    method = (event.get("httpMethod") or "GET").upper()
    path = event.get("resource") or event.get("path") or "/"
    try:
        route, matched = dispatcher.resolve(method, path)
    except ApiError as exc:
        response: HandlerResponse = exc.as_response()
    else:
        gateway_params = event.get("pathParameters") or {}
        if "{" in path:
            # Matched against the resource template itself, e.g. /photos/{photoId}.
            path_params = dict(gateway_params)
        else:
            path_params = {**matched, **gateway_params}
        request = HandlerRequest(
            method=method,
            raw_body=_event_body(event),
            query=dict(event.get("queryStringParameters") or {}),
            path_params=path_params,
        )
        response = dispatcher.dispatch(route, request)

    return {
        "statusCode": response.status_code,
        "headers": dict(JSON_HEADERS),
        "body": response.to_json(),
    }


def handler(event: dict, context: Any = None) -> dict:
    return handle_event(event, get_dispatcher())
