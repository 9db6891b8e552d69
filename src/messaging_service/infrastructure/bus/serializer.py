"""Wire envelope for messaging events on Pub/Sub.

``{"v": 1, "event": <event_type>, "published_at": <iso8601>, "data": {...}}``
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

ENVELOPE_VERSION = 1


def _default(o: object) -> Any:
    if isinstance(o, UUID):
        return str(o)
    if isinstance(o, datetime):
        return o.isoformat()
    if isinstance(o, Enum):
        return o.value
    raise TypeError(f"{type(o).__name__} is not JSON serializable")


def serialize_event(
    event_type: str,
    payload: dict[str, Any],
    published_at: datetime | None = None,
) -> str:
    envelope = {
        "v": ENVELOPE_VERSION,
        "event": event_type,
        "published_at": (published_at or datetime.now(timezone.utc)).isoformat(),
        "data": payload,
    }
    return json.dumps(envelope, default=_default, separators=(",", ":"))

