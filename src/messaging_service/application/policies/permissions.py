from __future__ import annotations

from collections.abc import Collection

from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import ForbiddenError, NotFoundError
from messaging_service.application.policies.messaging_access import (
    NOT_PARTICIPANT,
    can_view_conversation,
)


def assert_conversation_visible(
    principal: Principal,
    participant_ids: Collection[str] | None,
) -> Collection[str]:
    """Raise if conversation doesn't exist or principal may not see it."""
    if participant_ids is None:
        raise NotFoundError("Conversation not found")

    if not can_view_conversation(principal.actor_id, participant_ids, principal.role):
        raise ForbiddenError(NOT_PARTICIPANT)

    return participant_ids


def assert_participant(is_participant: bool) -> None:
    if not is_participant:
        raise ForbiddenError(NOT_PARTICIPANT)


def assert_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
