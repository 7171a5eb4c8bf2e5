"""
SQLAlchemy-based Tenant repository.

Provides:
- create / update / delete (staged on the session; committed by the store transaction)
- get_by_id, list_all
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from portal.models.tenant import Tenant
from portal.repos._flush import flush_or_conflict

__all__ = ["SqlAlchemyTenantRepo"]

_MUTABLE_FIELDS = frozenset({"name", "contact_email", "contact_phone", "address", "lead_id", "status"})


class SqlAlchemyTenantRepo:
    """
    Concrete Tenant repository using SQLAlchemy ORM.

    Expects a Session provided by the caller (e.g., FastAPI dependency).
    """

    def __init__(self, session: Session) -> None:
        if not isinstance(session, Session):
            raise TypeError("session must be an instance of sqlalchemy.orm.Session")
        self.session = session

    def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        return self.session.get(Tenant, str(tenant_id))

    def list_all(self) -> Sequence[Tenant]:
        stmt = select(Tenant).order_by(Tenant.created_at.desc(), Tenant.name)
        return list(self.session.execute(stmt).scalars().all())

    def create(
        self,
        *,
        name: str,
        contact_email: str,
        contact_phone: Optional[str] = None,
        address: Optional[str] = None,
        status: str = "active",
    ) -> Tenant:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("name must be a non-empty string")
        if not isinstance(contact_email, str) or not contact_email.strip():
            raise ValueError("contact_email must be a non-empty string")

        tenant = Tenant(
            name=name.strip(),
            contact_email=contact_email.strip().lower(),
            contact_phone=contact_phone,
            address=address,
            status=status,
        )
        self.session.add(tenant)
        flush_or_conflict(self.session, "Tenant creation failed due to a constraint violation")
        return tenant

    def update(self, tenant: Tenant, **fields: Any) -> Tenant:
        for k, v in fields.items():
            if k in _MUTABLE_FIELDS:
                setattr(tenant, k, v)
        flush_or_conflict(self.session, "Tenant update failed due to a constraint violation")
        return tenant

    def delete(self, tenant: Tenant) -> None:
        self.session.delete(tenant)
        self.session.flush()
