from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Index, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messaging_service.infrastructure.db.base import Base


class ConversationModel(Base):
    __tablename__ = "conversations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    # Pair stored in sorted order so (a, b) and (b, a) hit the same unique key
    participant_low: Mapped[str] = mapped_column(String(64), nullable=False)
    participant_high: Mapped[str] = mapped_column(String(64), nullable=False)
    initiated_by: Mapped[str] = mapped_column(String(64), nullable=False)
    stage: Mapped[str] = mapped_column(String(32), nullable=False, default="contact_initiated")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    messages = relationship("MessageModel", back_populates="conversation", lazy="noload")

    __table_args__ = (
        UniqueConstraint("participant_low", "participant_high", name="uq_conversation_pair"),
        CheckConstraint("participant_low < participant_high", name="ck_conversation_ordered_pair"),
    )


Index(
    "ix_conversations_low_updated",
    ConversationModel.participant_low,
    ConversationModel.updated_at.desc(),
)
Index(
    "ix_conversations_high_updated",
    ConversationModel.participant_high,
    ConversationModel.updated_at.desc(),
)
