from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from messaging_service.application.policies.messaging_access import AccessDecision


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ForbiddenError(AppError):
    pass


class MessagingDeniedError(ForbiddenError):
    """A send was refused by the access evaluator."""

    def __init__(self, decision: AccessDecision) -> None:
        self.decision = decision
        super().__init__(decision.reason or "Messaging not permitted")


class ValidationError(AppError):
    pass


class StoreUnavailableError(AppError):
    """Conversation or subscription store could not answer. Safe to retry."""
