"""
Device token registration and push notification fan-out.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor

from pings.handlers.base import BaseHandler, HandlerRequest
from pings.records import DeviceToken
from pings.responses import HandlerResponse, NotFound, ValidationFailed, created, ok
from pings.schemas import PLATFORMS, NotificationPayload
from pings.validation import is_blank, parse_payload, require_choice, require_fields

logger = logging.getLogger(__name__)

MAX_PUBLISH_WORKERS = 8


def platform_message(platform: str, title: str, message: str) -> tuple[str, str]:
    """Return (message, structure) for one device platform."""
    if platform == "android":
        content = {"title": title, "body": message}
        envelope = {"notification": content, "data": dict(content)}
        return json.dumps(envelope, ensure_ascii=False), "json"
    return message, "default"


class NotificationsHandler(BaseHandler):
    name = "notifications"
    failure_message = "Failed to process notification request"

    def dispatch(self, request: HandlerRequest) -> HandlerResponse:
        body = request.json()
        require_fields(body, ("userId", "deviceToken", "platform"))
        require_choice(body["platform"], PLATFORMS, "platform")
        payload = parse_payload(NotificationPayload, body)

        if payload.action == "register":
            return self._register(payload)
        if payload.action == "deregister":
            return self._deregister(payload)
        if payload.action == "send":
            return self._send(payload)
        raise ValidationFailed("Invalid action")

    def _register(self, payload: NotificationPayload) -> HandlerResponse:
        token = DeviceToken(
            user_id=payload.userId,
            device_token=payload.deviceToken,
            platform=payload.platform,
        )
        self.store.put(self.settings.tokens_table, token.as_dict())
        logger.info("Registered %s device for %s", token.platform, token.user_id)
        return created(
            {"success": True, "message": "Device token registered successfully"}
        )

    def _deregister(self, payload: NotificationPayload) -> HandlerResponse:
        self.store.delete(
            self.settings.tokens_table,
            {"userId": payload.userId, "deviceToken": payload.deviceToken},
        )
        logger.info("Deregistered device for %s", payload.userId)
        return ok({"success": True, "message": "Device token deregistered"})

    def _send(self, payload: NotificationPayload) -> HandlerResponse:
        if is_blank(payload.message) or is_blank(payload.title):
            raise ValidationFailed("Missing message or title for send action")

        tokens = self.store.query(self.settings.tokens_table, payload.userId)
        if not tokens:
            raise NotFound("No device tokens found for user")

        workers = min(len(tokens), MAX_PUBLISH_WORKERS)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self._publish_to, token, payload.title, payload.message)
                for token in tokens
            ]
            # Wait for every publish; the first failure fails the request.
            for future in futures:
                future.result()

        sent = len(tokens)
        logger.info("Sent notification to %d devices for %s", sent, payload.userId)
        return ok(
            {
                "success": True,
                "sentCount": sent,
                "message": f"Notification sent to {sent} devices",
            }
        )

    def _publish_to(self, token: dict, title: str, message: str) -> None:
        body, structure = platform_message(token["platform"], title, message)
        self.notifier.publish(body, target=token["deviceToken"], structure=structure)
