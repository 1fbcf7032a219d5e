from __future__ import annotations

from typing import Any, Protocol


class EventPublisher(Protocol):
    """Fan-out of committed changes to realtime clients.

    ``payload`` is a plain dict of the event's fields. Delivery is best
    effort: callers log and ignore failures.
    """

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None: ...
