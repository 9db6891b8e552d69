"""Import all models so Base.metadata sees every table."""
from messaging_service.infrastructure.db.models.actor import ActorModel
from messaging_service.infrastructure.db.models.conversation import ConversationModel
from messaging_service.infrastructure.db.models.message import MessageModel
from messaging_service.infrastructure.db.models.outbox import OutboxMessageModel

__all__ = [
    "ActorModel",
    "ConversationModel",
    "MessageModel",
    "OutboxMessageModel",
]
