"""
Assignment model.

A grant of visibility from one resource to exactly one grantee: either a
single principal or an entire tenant. The CHECK constraint backs up the
application-level validation done by the assignment ledger.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from portal.core.types import Grantee, PrincipalGrantee, TenantGrantee
from portal.db.base import Base, new_id
from portal.models._clock import utcnow


class Assignment(Base):
    __tablename__ = "assignment"
    __table_args__ = (
        CheckConstraint(
            "(grantee_principal_id IS NULL) <> (grantee_tenant_id IS NULL)",
            name="single_grantee",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    resource_id: Mapped[str] = mapped_column(
        ForeignKey("resource.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Exactly one of these is set
    grantee_principal_id: Mapped[str | None] = mapped_column(
        ForeignKey("principal.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    grantee_tenant_id: Mapped[str | None] = mapped_column(
        ForeignKey("tenant.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    granted_by: Mapped[str] = mapped_column(
        ForeignKey("principal.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True
    )

    @property
    def grantee(self) -> Grantee:
        if self.grantee_principal_id is not None:
            return PrincipalGrantee(self.grantee_principal_id)
        return TenantGrantee(self.grantee_tenant_id)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return (
            f"<Assignment id={self.id!r} resource_id={self.resource_id!r} "
            f"principal={self.grantee_principal_id!r} tenant={self.grantee_tenant_id!r}>"
        )
