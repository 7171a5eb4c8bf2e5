"""
Resource model.

Files and news items share one table: their assignment semantics are
identical, so `kind` discriminates. Raw file bytes live in the object store;
only the opaque `storage_locator` is kept here.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from portal.core.types import ResourceStatus
from portal.db.base import Base, new_id
from portal.models._clock import utcnow


class Resource(Base):
    __tablename__ = "resource"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # 'file' or 'news'
    kind: Mapped[str] = mapped_column(String(16), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # File descriptor (unused for news)
    original_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    size_bytes: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    storage_locator: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # News body (rich text)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ResourceStatus.ACTIVE.value, server_default=ResourceStatus.ACTIVE.value
    )

    created_by: Mapped[str] = mapped_column(
        ForeignKey("principal.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True
    )

    def __repr__(self) -> str:
        return f"<Resource id={self.id!r} kind={self.kind!r} title={self.title!r} status={self.status!r}>"
