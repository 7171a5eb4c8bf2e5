"""
Principal model.

An authenticated account, keyed by the identity provider's user id.

Tiers:
  - 'operator':    portal staff; never bound to a tenant.
  - 'tenant-lead': administers exactly one tenant.
  - 'member':      belongs to one tenant. Freshly registered members may be
                   unbound until an operator assigns them.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from portal.core.types import Tier
from portal.db.base import Base
from portal.models._clock import utcnow


class Principal(Base):
    __tablename__ = "principal"
    __table_args__ = (
        CheckConstraint(
            "tier IN ('operator', 'tenant-lead', 'member')",
            name="known_tier",
        ),
        CheckConstraint(
            "tier <> 'operator' OR tenant_id IS NULL",
            name="operator_unbound",
        ),
    )

    # Identity provider's user id
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)

    tier: Mapped[str] = mapped_column(
        String(16), nullable=False, default=Tier.MEMBER.value, index=True
    )
    tenant_id: Mapped[str | None] = mapped_column(
        ForeignKey("tenant.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Principal id={self.id!r} tier={self.tier!r} tenant_id={self.tenant_id!r}>"
