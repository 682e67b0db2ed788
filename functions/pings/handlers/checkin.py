"""
Senior check-ins (mood, status, quick responses).
"""

from __future__ import annotations

import json
import logging

from pings.handlers.base import BaseHandler, HandlerRequest
from pings.records import CheckinRecord, checkin_id, event_stamp
from pings.responses import HandlerResponse, created
from pings.schemas import CHECKIN_TYPES, CheckinPayload
from pings.validation import parse_payload, require_choice, require_fields

logger = logging.getLogger(__name__)


class CheckinHandler(BaseHandler):
    name = "checkin"
    failure_message = "Failed to process checkin"

    def create(self, request: HandlerRequest) -> HandlerResponse:
        body = request.json()
        require_fields(body, ("userId", "type", "value"))
        require_choice(body["type"], CHECKIN_TYPES, "type")
        payload = parse_payload(CheckinPayload, body)

        millis, stamp = event_stamp()
        record = CheckinRecord(
            id=checkin_id(payload.userId, millis),
            user_id=payload.userId,
            type=payload.type,
            value=payload.value,
            emoji=payload.emoji,
            timestamp=payload.timestamp or stamp,
        )
        self.store.put(self.settings.checkins_table, record.as_dict())
        logger.info("Stored checkin %s", record.id)

        record.sent_to_family = self._notify_family(record)
        return created(record.as_dict())

    def _notify_family(self, record: CheckinRecord) -> bool:
        """
        Publish the check-in to the family topic. The record is already
        stored, so a failed publish is reported through sentToFamily rather
        than failing the request.
        """
        topic = self.settings.family_notifications_topic
        if not topic:
            return False
        try:
            self.notifier.publish(json.dumps(record.family_message()), topic=topic)
        except Exception:
            logger.exception("Checkin %s stored but family notify failed", record.id)
            return False
        return True
