"""Store failures that mean "cannot decide right now", never "denied"."""
from __future__ import annotations

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from messaging_service.application.exceptions import StoreUnavailableError

# TimeoutError: asyncpg command_timeout surfaces as the builtin.
# ConnectionError: a refused connect escapes the DBAPI wrapper.
STORE_ERRORS: tuple[type[BaseException], ...] = (
    OperationalError,
    InterfaceError,
    PoolTimeoutError,
    TimeoutError,
    ConnectionError,
)


def is_store_error(exc: BaseException) -> bool:
    return isinstance(exc, STORE_ERRORS)


def as_store_unavailable(exc: BaseException) -> StoreUnavailableError:
    return StoreUnavailableError(f"Message store unavailable: {type(exc).__name__}")
