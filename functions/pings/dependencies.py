"""
Gateway wiring for the handlers.
"""

from __future__ import annotations

from dataclasses import dataclass

from pings.config import Settings, get_settings
from pings.db import (
    DocumentStore,
    DynamoDocumentStore,
    InMemoryDocumentStore,
    SqlDocumentStore,
    key_schemas_for,
)
from pings.notifier import InMemoryNotifier, Notifier, RedisNotifier, SnsNotifier
from pings.storage import BlobStore, InMemoryBlobStore, S3BlobStore


@dataclass
class Gateways:
    """External collaborators injected into every handler."""

    store: DocumentStore
    blobs: BlobStore
    notifier: Notifier


_gateways: Gateways | None = None


def build_document_store(settings: Settings) -> DocumentStore:
    schemas = key_schemas_for(settings)
    backend = settings.document_backend
    if settings.use_in_memory_backends or backend == "memory":
        return InMemoryDocumentStore(schemas)
    if backend == "sql":
        return SqlDocumentStore(settings.database_url or "", schemas)
    return DynamoDocumentStore(
        schemas=schemas,
        region=settings.aws_region,
        endpoint=settings.aws_endpoint_url,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )


def build_blob_store(settings: Settings) -> BlobStore:
    if settings.use_in_memory_backends or settings.blob_backend == "memory":
        return InMemoryBlobStore()
    return S3BlobStore(
        bucket=settings.photos_bucket,
        region=settings.aws_region,
        endpoint=settings.aws_endpoint_url,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )


def build_notifier(settings: Settings) -> Notifier:
    backend = settings.notifier_backend
    if settings.use_in_memory_backends or backend == "memory":
        return InMemoryNotifier()
    if backend == "redis":
        if not settings.redis_url:
            raise ValueError("REDIS_URL is required for the redis notifier")
        return RedisNotifier(url=settings.redis_url)
    return SnsNotifier(
        region=settings.aws_region,
        endpoint=settings.aws_endpoint_url,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )


def build_gateways(settings: Settings) -> Gateways:
    return Gateways(
        store=build_document_store(settings),
        blobs=build_blob_store(settings),
        notifier=build_notifier(settings),
    )


def get_gateways() -> Gateways:
    """
    Return process-wide gateways so in-memory state persists across requests.
    """
    global _gateways
    if _gateways:
        return _gateways
    _gateways = build_gateways(get_settings())
    return _gateways
