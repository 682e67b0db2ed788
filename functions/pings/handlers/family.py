"""
Family circle membership and the family dashboard status view.
"""

from __future__ import annotations

import logging

from pings.handlers.base import BaseHandler, HandlerRequest
from pings.records import FamilyMember
from pings.responses import HandlerResponse, NotFound, ValidationFailed, created, ok
from pings.schemas import FAMILY_ROLES, FamilyPayload, MemberPayload
from pings.validation import parse_payload, require_choice, require_fields

logger = logging.getLogger(__name__)


class FamilyHandler(BaseHandler):
    name = "family"
    failure_message = "Failed to process family request"

    def status(self, request: HandlerRequest) -> HandlerResponse:
        user_id = request.query.get("userId")
        if not user_id:
            raise ValidationFailed("Missing userId")

        user = self.store.get(self.settings.users_table, {"userId": user_id})
        if user is None:
            raise NotFound("User not found")

        recent = self.store.query(
            self.settings.checkins_table,
            user_id,
            limit=self.settings.recent_checkins_limit,
            newest_first=True,
        )
        return ok({"user": user, "recentCheckins": recent})

    def update_membership(self, request: HandlerRequest) -> HandlerResponse:
        body = request.json()
        require_fields(body, ("userId", "familyId", "action"))
        payload = parse_payload(FamilyPayload, body)

        if payload.action == "join":
            return self._join(payload)
        if payload.action == "leave":
            return self._leave(payload)
        raise ValidationFailed("Invalid action")

    def _join(self, payload: FamilyPayload) -> HandlerResponse:
        if not payload.member:
            raise ValidationFailed("Missing member info for join action")
        require_fields(payload.member, ("name", "role"), prefix="member.")
        require_choice(payload.member["role"], FAMILY_ROLES, "member role")
        member_payload = parse_payload(MemberPayload, payload.member)

        # userId/familyId come from the request, never from the member blob.
        extra = {
            key: value
            for key, value in (member_payload.model_extra or {}).items()
            if key not in ("userId", "familyId", "createdAt")
        }
        member = FamilyMember(
            user_id=payload.userId,
            family_id=payload.familyId,
            name=member_payload.name,
            role=member_payload.role,
            avatar=member_payload.avatar,
            device_tokens=member_payload.deviceTokens,
            extra=extra,
        )
        self.store.put(self.settings.family_table, member.as_dict())
        logger.info("%s joined family %s", member.user_id, member.family_id)
        return created(
            {
                "success": True,
                "member": member.as_dict(),
                "message": "Joined family circle successfully",
            }
        )

    def _leave(self, payload: FamilyPayload) -> HandlerResponse:
        self.store.delete(self.settings.family_table, {"userId": payload.userId})
        logger.info("%s left family %s", payload.userId, payload.familyId)
        return ok({"success": True, "message": "Left family circle"})
