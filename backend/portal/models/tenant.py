"""
Tenant model.

An organization ("client" in the portal UI) whose member accounts share
tenant-wide grants. At most one tenant-lead principal per tenant.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from portal.core.types import TenantStatus
from portal.db.base import Base, new_id
from portal.models._clock import utcnow


class Tenant(Base):
    """
    A customer organization boundary.
    """

    __tablename__ = "tenant"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Primary contact
    contact_email: Mapped[str] = mapped_column(String(320), nullable=False)
    contact_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Lead principal (1:1); principal and tenant reference each other, so the FK is added after both tables
    lead_id: Mapped[str | None] = mapped_column(
        ForeignKey("principal.id", ondelete="SET NULL", use_alter=True, name="fk_tenant_lead_id_principal"),
        nullable=True,
        unique=True,
    )

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=TenantStatus.ACTIVE.value, server_default=TenantStatus.ACTIVE.value
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Tenant id={self.id!r} name={self.name!r} status={self.status!r}>"
