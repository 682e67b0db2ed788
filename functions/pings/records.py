"""
Persisted record shapes and the server-generated fields they carry.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

_clock_lock = threading.Lock()
_last_millis = 0


def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    """UTC timestamp with millisecond precision, e.g. 2025-01-01T09:30:00.000Z."""
    return _iso(datetime.now(timezone.utc))


def iso_from_millis(millis: int) -> str:
    return _iso(datetime.fromtimestamp(millis / 1000, timezone.utc))


def epoch_millis() -> int:
    """Wall-clock milliseconds, strictly increasing within this process."""
    global _last_millis
    with _clock_lock:
        now = int(time.time() * 1000)
        if now <= _last_millis:
            now = _last_millis + 1
        _last_millis = now
        return now


def event_stamp() -> tuple[int, str]:
    """
    One tick of the process clock as (millis, ISO timestamp). Event tables
    are keyed by (userId, timestamp), so server-made timestamps come from the
    same strictly increasing clock as ids and never collide in-process.
    """
    millis = epoch_millis()
    return millis, iso_from_millis(millis)


def checkin_id(user_id: str, millis: Optional[int] = None) -> str:
    if millis is None:
        millis = epoch_millis()
    return f"{user_id}-{millis}"


def _compact(data: dict) -> dict:
    return {key: value for key, value in data.items() if value is not None}


@dataclass
class CheckinRecord:
    id: str
    user_id: str
    type: str
    value: str
    timestamp: str
    emoji: Optional[str] = None
    sent_to_family: bool = False

    def as_dict(self) -> dict:
        return _compact(
            {
                "id": self.id,
                "userId": self.user_id,
                "type": self.type,
                "value": self.value,
                "emoji": self.emoji,
                "timestamp": self.timestamp,
                "sentToFamily": self.sent_to_family,
            }
        )

    def family_message(self) -> dict:
        return _compact(
            {
                "type": "checkin",
                "userId": self.user_id,
                "value": self.value,
                "emoji": self.emoji,
                "timestamp": self.timestamp,
            }
        )


@dataclass
class MedicationLog:
    user_id: str
    medication_id: str
    action: str
    timestamp: str
    notes: Optional[str] = None

    def as_dict(self) -> dict:
        return _compact(
            {
                "userId": self.user_id,
                "medicationId": self.medication_id,
                "action": self.action,
                "timestamp": self.timestamp,
                "notes": self.notes,
            }
        )


def photo_storage_key(user_id: str, photo_id: str, filename: str) -> str:
    return f"photos/{user_id}/{photo_id}-{filename}"


@dataclass
class PhotoRecord:
    photo_id: str
    user_id: str
    filename: str
    content_type: str
    storage_key: str
    upload_url: Optional[str] = None
    created_at: str = field(default_factory=now_iso)
    metadata: Optional[dict] = None

    def as_dict(self) -> dict:
        return _compact(
            {
                "photoId": self.photo_id,
                "userId": self.user_id,
                "filename": self.filename,
                "contentType": self.content_type,
                "storageKey": self.storage_key,
                "uploadUrl": self.upload_url,
                "createdAt": self.created_at,
                "metadata": self.metadata,
            }
        )


@dataclass
class FamilyMember:
    user_id: str
    family_id: str
    name: str
    role: str
    avatar: Optional[str] = None
    device_tokens: Optional[list[str]] = None
    created_at: str = field(default_factory=now_iso)
    extra: dict = field(default_factory=dict)

    def as_dict(self) -> dict:
        data = dict(self.extra)
        data.update(
            {
                "userId": self.user_id,
                "familyId": self.family_id,
                "name": self.name,
                "role": self.role,
                "avatar": self.avatar,
                "deviceTokens": self.device_tokens,
                "createdAt": self.created_at,
            }
        )
        return _compact(data)


@dataclass
class DeviceToken:
    user_id: str
    device_token: str
    platform: str
    created_at: str = field(default_factory=now_iso)
    last_used: Optional[str] = None

    def __post_init__(self):
        if self.last_used is None:
            self.last_used = self.created_at

    def as_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "deviceToken": self.device_token,
            "platform": self.platform,
            "createdAt": self.created_at,
            "lastUsed": self.last_used,
        }
