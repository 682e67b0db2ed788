"""
Pub/sub notification transport.

Supports an in-memory fallback for tests/local runs, SNS for production and
Redis pub/sub for self-hosted deployments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

import boto3
import redis
from redis import exceptions as redis_exceptions


class Notifier(Protocol):
    """Publish one message to a topic or to a single endpoint."""

    def publish(
        self,
        message: str,
        *,
        topic: Optional[str] = None,
        target: Optional[str] = None,
        structure: str = "default",
    ) -> Optional[str]:
        ...


@dataclass
class PublishedMessage:
    message: str
    topic: Optional[str] = None
    target: Optional[str] = None
    structure: str = "default"


def _destination(topic: Optional[str], target: Optional[str]) -> str:
    if bool(topic) == bool(target):
        raise ValueError("Exactly one of topic or target is required")
    return topic or target


@dataclass
class InMemoryNotifier:
    """Records published messages for tests/dev."""

    published: list[PublishedMessage] = field(default_factory=list)

    def publish(
        self,
        message: str,
        *,
        topic: Optional[str] = None,
        target: Optional[str] = None,
        structure: str = "default",
    ) -> Optional[str]:
        _destination(topic, target)
        self.published.append(
            PublishedMessage(
                message=message, topic=topic, target=target, structure=structure
            )
        )
        return str(len(self.published))

    def sent_to(self, destination: str) -> list[PublishedMessage]:
        return [
            item
            for item in self.published
            if destination in (item.topic, item.target)
        ]


@dataclass
class SnsNotifier:
    """SNS publisher: topics by TopicArn, devices by endpoint TargetArn."""

    region: Optional[str] = None
    endpoint: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    def __post_init__(self):
        self._client = boto3.client(
            "sns",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
        )

    def publish(
        self,
        message: str,
        *,
        topic: Optional[str] = None,
        target: Optional[str] = None,
        structure: str = "default",
    ) -> Optional[str]:
        _destination(topic, target)
        params = {"Message": message}
        if topic:
            params["TopicArn"] = topic
        else:
            params["TargetArn"] = target
        if structure == "json":
            params["MessageStructure"] = "json"
        response = self._client.publish(**params)
        return response.get("MessageId")


@dataclass
class RedisNotifier:
    """Redis pub/sub publisher; the topic or endpoint name is the channel."""

    url: str
    channel_prefix: str = "pings:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def publish(
        self,
        message: str,
        *,
        topic: Optional[str] = None,
        target: Optional[str] = None,
        structure: str = "default",
    ) -> Optional[str]:
        channel = f"{self.channel_prefix}{_destination(topic, target)}"
        try:
            receivers = self.client.publish(channel, message)
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections; reconnect for the next
            # call and let this one fail.
            self.client = redis.Redis.from_url(self.url)
            raise
        return str(receivers)
