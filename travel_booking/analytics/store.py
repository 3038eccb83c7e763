from __future__ import annotations

import os
import time
from collections import deque
from typing import Any

EVENT_TYPES = frozenset({"search", "search_failed", "booking"})
MAX_EVENTS = int(os.getenv("ANALYTICS_MAX_EVENTS", "10000"))

# Newest events win once the buffer is full; nothing outlives the process.
_events: deque[dict[str, Any]] = deque(maxlen=MAX_EVENTS)


def record_event(event_type: str, data: dict[str, Any]) -> None:
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown analytics event type: {event_type!r}")
    _events.append({
        **data,
        "type": event_type,
        "timestamp": time.time(),
    })


def get_events() -> list[dict[str, Any]]:
    return list(_events)


def clear_events() -> None:
    _events.clear()
