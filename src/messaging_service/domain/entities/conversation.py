from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from messaging_service.domain.value_objects.enums import ConversationStage


def ordered_pair(first: str, second: str) -> tuple[str, str]:
    """Canonical storage order for an unordered participant pair."""
    if first == second:
        raise ValueError("A conversation needs two distinct participants")
    return (first, second) if first < second else (second, first)


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    participant_low: str
    participant_high: str
    initiated_by: str
    stage: str
    created_at: datetime
    updated_at: datetime

    @property
    def participant_ids(self) -> frozenset[str]:
        return frozenset((self.participant_low, self.participant_high))

    def has_participant(self, actor_id: str) -> bool:
        return actor_id in (self.participant_low, self.participant_high)

    def other_participant(self, actor_id: str) -> str:
        if actor_id == self.participant_low:
            return self.participant_high
        if actor_id == self.participant_high:
            return self.participant_low
        raise ValueError(f"{actor_id} is not a participant of {self.id}")

    def stage_after_message_from(self, sender_id: str) -> ConversationStage:
        """A message from the non-initiating side activates the conversation."""
        if self.stage == ConversationStage.ACTIVE_CONVERSATION or sender_id != self.initiated_by:
            return ConversationStage.ACTIVE_CONVERSATION
        return ConversationStage.CONTACT_INITIATED
