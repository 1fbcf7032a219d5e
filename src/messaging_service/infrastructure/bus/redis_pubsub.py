"""Redis Pub/Sub publisher for realtime fan-out."""
from __future__ import annotations

from typing import Any

import redis.asyncio as aioredis

from messaging_service.infrastructure.bus.serializer import serialize_event


class RedisPubSubPublisher:
    """Implements application.ports.bus.EventPublisher.

    The socket gateway subscribes to the channel and routes each event to
    the ``user:<id>`` and ``conversation:<id>`` rooms.
    """

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        raw = serialize_event(event_type, payload)
        await self._redis.publish(self._channel, raw)
