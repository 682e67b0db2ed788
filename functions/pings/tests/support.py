"""
Helpers for building handlers and apps on in-memory gateways.
"""

from __future__ import annotations

import json

from fastapi.testclient import TestClient

from pings.app import create_app
from pings.config import Settings
from pings.db import InMemoryDocumentStore, key_schemas_for
from pings.dependencies import Gateways
from pings.handlers import HandlerRequest
from pings.notifier import InMemoryNotifier
from pings.storage import InMemoryBlobStore


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def make_gateways(settings: Settings) -> Gateways:
    return Gateways(
        store=InMemoryDocumentStore(key_schemas_for(settings)),
        blobs=InMemoryBlobStore(),
        notifier=InMemoryNotifier(),
    )


def make_client(settings: Settings, gateways: Gateways) -> TestClient:
    return TestClient(create_app(settings=settings, gateways=gateways))


def post(body: dict | None = None, **kwargs) -> HandlerRequest:
    raw = json.dumps(body) if body is not None else None
    return HandlerRequest(method="POST", raw_body=raw, **kwargs)


def get(**kwargs) -> HandlerRequest:
    return HandlerRequest(method="GET", **kwargs)


def delete(**kwargs) -> HandlerRequest:
    return HandlerRequest(method="DELETE", **kwargs)
