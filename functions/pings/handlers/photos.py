"""
Photo uploads and presigned URL generation.

Photo bytes never pass through the backend: clients PUT to the presigned
upload URL and GET from the presigned download URL.
"""

from __future__ import annotations

import logging
import uuid

from pings.handlers.base import BaseHandler, HandlerRequest
from pings.records import PhotoRecord, photo_storage_key
from pings.responses import HandlerResponse, NotFound, ValidationFailed, created, ok
from pings.schemas import PhotoUploadPayload
from pings.validation import parse_payload, require_fields

logger = logging.getLogger(__name__)


def _storage_key(item: dict) -> str:
    # Older rows predate storageKey; derive it the same way it was issued.
    return item.get("storageKey") or photo_storage_key(
        item["userId"], item["photoId"], item["filename"]
    )


class PhotosHandler(BaseHandler):
    name = "photos"
    failure_message = "Failed to process photo request"

    def _photo_id(self, request: HandlerRequest) -> str:
        photo_id = request.path_params.get("photoId")
        if not photo_id:
            raise ValidationFailed("Missing photoId")
        return photo_id

    def create_upload(self, request: HandlerRequest) -> HandlerResponse:
        body = request.json()
        require_fields(body, ("userId", "filename", "contentType"))
        payload = parse_payload(PhotoUploadPayload, body)

        photo_id = payload.photoId or str(uuid.uuid4())
        storage_key = photo_storage_key(payload.userId, photo_id, payload.filename)
        expires_in = self.settings.photo_url_expiry
        upload_url = self.blobs.presign_put(
            storage_key, content_type=payload.contentType, expires_in=expires_in
        )

        photo = PhotoRecord(
            photo_id=photo_id,
            user_id=payload.userId,
            filename=payload.filename,
            content_type=payload.contentType,
            storage_key=storage_key,
            upload_url=upload_url,
            metadata=payload.metadata,
        )
        self.store.put(self.settings.photos_table, photo.as_dict())
        logger.info("Issued upload URL for photo %s", photo_id)
        return created(
            {"photoId": photo_id, "uploadUrl": upload_url, "expiresIn": expires_in}
        )

    def get_photo(self, request: HandlerRequest) -> HandlerResponse:
        photo_id = self._photo_id(request)
        item = self.store.get(self.settings.photos_table, {"photoId": photo_id})
        if item is None:
            raise NotFound("Photo not found")
        url = self.blobs.presign_get(
            _storage_key(item), expires_in=self.settings.photo_url_expiry
        )
        return ok({**item, "url": url})

    def delete_photo(self, request: HandlerRequest) -> HandlerResponse:
        photo_id = self._photo_id(request)
        item = self.store.get(self.settings.photos_table, {"photoId": photo_id})
        if item is not None:
            self.blobs.delete_object(_storage_key(item))
            self.store.delete(self.settings.photos_table, {"photoId": photo_id})
            logger.info("Deleted photo %s", photo_id)
        return ok({"success": True})
