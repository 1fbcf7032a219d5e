"""Best-effort realtime fan-out of committed changes."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any

from messaging_service.application.ports.bus import EventPublisher

logger = logging.getLogger(__name__)


async def publish_event(publisher: EventPublisher | None, event: Any) -> None:
    """Publish a domain event after commit.

    The database is the source of truth, so a failed publish is logged and
    the request still succeeds.
    """
    if publisher is None:
        return
    event_type = type(event).event_type
    try:
        await publisher.publish(event_type, dataclasses.asdict(event))
    except Exception:
        logger.exception("Failed to publish %s event", event_type)
