from __future__ import annotations

from dataclasses import dataclass

from messaging_service.application.policies.messaging_access import AccessDecision
from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.value_objects.enums import ConversationStage


@dataclass(frozen=True, slots=True)
class AccessCheckDTO:
    decision: AccessDecision
    conversation: Conversation | None

    @property
    def stage(self) -> ConversationStage:
        if self.conversation is None:
            return ConversationStage.NO_RELATIONSHIP
        return ConversationStage(self.conversation.stage)
