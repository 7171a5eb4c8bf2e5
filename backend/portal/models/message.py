"""
Message model.

Messages between principals (direct, tenant broadcast or operator announcement).
Whether a pair may talk at all is decided by the messaging authorizer before
a row is ever written.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from portal.core.types import MessageKind
from portal.db.base import Base, new_id
from portal.models._clock import utcnow


class Message(Base):
    __tablename__ = "message"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    sender_id: Mapped[str] = mapped_column(
        ForeignKey("principal.id", ondelete="CASCADE"), nullable=False, index=True
    )
    recipient_id: Mapped[str] = mapped_column(
        ForeignKey("principal.id", ondelete="CASCADE"), nullable=False, index=True
    )

    subject: Mapped[str | None] = mapped_column(String(255), nullable=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[str] = mapped_column(
        String(16), nullable=False, default=MessageKind.DIRECT.value, server_default=MessageKind.DIRECT.value
    )

    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True
    )

    def __repr__(self) -> str:
        return f"<Message id={self.id!r} sender_id={self.sender_id!r} recipient_id={self.recipient_id!r}>"
