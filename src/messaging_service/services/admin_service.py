from __future__ import annotations

from messaging_service.application.dto.conversation import ConversationFilterDTO
from messaging_service.application.dto.principal import Principal
from messaging_service.application.policies.permissions import assert_admin
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import Conversation


async def list_conversations(
    filters: ConversationFilterDTO,
    principal: Principal,
    uow: UnitOfWork,
) -> list[Conversation]:
    assert_admin(principal)
    return await uow.conversations.list_for_admin(filters)
