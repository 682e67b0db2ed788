"""
Medication logging.
"""

from __future__ import annotations

import logging

from pings.handlers.base import BaseHandler, HandlerRequest
from pings.records import MedicationLog, event_stamp
from pings.responses import HandlerResponse, created
from pings.schemas import MEDICATION_ACTIONS, MedicationPayload
from pings.validation import parse_payload, require_choice, require_fields

logger = logging.getLogger(__name__)

ACTION_MESSAGES = {
    "taken": "Great job! Medication logged.",
    "skipped": "Noted. Skipped medication logged.",
    "refill": "Refill logged. Don't forget to reorder!",
    "log": "Medication log entry saved.",
}
DEFAULT_ACTION_MESSAGE = "Medication action recorded."


def action_message(action: str) -> str:
    return ACTION_MESSAGES.get(action, DEFAULT_ACTION_MESSAGE)


class MedicationsHandler(BaseHandler):
    name = "medications"
    failure_message = "Failed to process medication log"

    def log(self, request: HandlerRequest) -> HandlerResponse:
        body = request.json()
        require_fields(body, ("userId", "medicationId", "action"))
        require_choice(body["action"], MEDICATION_ACTIONS, "action")
        payload = parse_payload(MedicationPayload, body)

        entry = MedicationLog(
            user_id=payload.userId,
            medication_id=payload.medicationId,
            action=payload.action,
            timestamp=payload.timestamp or event_stamp()[1],
            notes=payload.notes,
        )
        self.store.put(self.settings.medications_table, entry.as_dict())
        logger.info(
            "Logged medication %s (%s) for %s",
            entry.medication_id,
            entry.action,
            entry.user_id,
        )
        return created(
            {
                "success": True,
                "log": entry.as_dict(),
                "message": action_message(entry.action),
            }
        )
