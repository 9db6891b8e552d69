from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel

from messaging_service.infrastructure.db.repositories._cursor import encode_cursor

T = TypeVar("T")
R = TypeVar("R")


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]  # type: ignore[type-var]
    next_cursor: str | None = None


def next_cursor(
    rows: Sequence[R],
    limit: int,
    sort_key: Callable[[R], tuple[datetime, UUID]],
) -> str | None:
    """Cursor for the page after ``rows``; None once a short page is seen."""
    if len(rows) < limit:
        return None
    return encode_cursor(*sort_key(rows[-1]))
