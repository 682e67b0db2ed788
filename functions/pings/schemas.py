"""
Pydantic schemas for request payloads.

Field names follow the JSON the mobile app sends (camelCase). Unknown fields
are ignored except on family members, whose extra attributes are persisted.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

CHECKIN_TYPES = ("checkin", "mood", "status")
MEDICATION_ACTIONS = ("taken", "skipped", "refill", "log")
FAMILY_ROLES = ("senior", "caregiver", "family")
PLATFORMS = ("android", "ios")


class CheckinPayload(BaseModel):
    userId: str
    type: Literal["checkin", "mood", "status"]
    value: str
    emoji: Optional[str] = None
    timestamp: Optional[str] = None


class MedicationPayload(BaseModel):
    userId: str
    medicationId: str
    action: Literal["taken", "skipped", "refill", "log"]
    timestamp: Optional[str] = None
    notes: Optional[str] = None


class PhotoUploadPayload(BaseModel):
    userId: str
    filename: str = Field(..., max_length=255)
    contentType: str
    photoId: Optional[str] = None
    metadata: Optional[dict[str, str]] = None


class FamilyPayload(BaseModel):
    userId: str
    familyId: str
    action: str
    member: Optional[dict] = None


class MemberPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    role: Literal["senior", "caregiver", "family"]
    avatar: Optional[str] = None
    deviceTokens: Optional[list[str]] = None


class NotificationPayload(BaseModel):
    userId: str
    deviceToken: str
    platform: Literal["android", "ios"]
    action: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
