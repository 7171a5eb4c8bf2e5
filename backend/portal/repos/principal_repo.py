"""
SQLAlchemy-based Principal repository.

Lookups by id/email, tenant rosters, and staged create/update/delete.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from portal.core.types import Tier
from portal.models.principal import Principal
from portal.repos._flush import flush_or_conflict

__all__ = ["SqlAlchemyPrincipalRepo"]

_MUTABLE_FIELDS = frozenset({"display_name", "tier", "tenant_id", "email"})


class SqlAlchemyPrincipalRepo:
    """
    Concrete Principal repository using SQLAlchemy ORM.
    """

    def __init__(self, session: Session) -> None:
        if not isinstance(session, Session):
            raise TypeError("session must be an instance of sqlalchemy.orm.Session")
        self.session = session

    def get_by_id(self, principal_id: str) -> Optional[Principal]:
        return self.session.get(Principal, str(principal_id))

    def get_by_email(self, email: str) -> Optional[Principal]:
        if not isinstance(email, str) or not email.strip():
            return None
        stmt = select(Principal).where(func.lower(Principal.email) == email.strip().lower())
        return self.session.execute(stmt).scalars().first()

    def create(
        self,
        *,
        principal_id: str,
        email: str,
        display_name: str,
        tier: str,
        tenant_id: Optional[str] = None,
    ) -> Principal:
        if not isinstance(principal_id, str) or not principal_id.strip():
            raise ValueError("principal_id must be a non-empty string")
        if not isinstance(email, str) or not email.strip():
            raise ValueError("email must be a non-empty string")

        principal = Principal(
            id=principal_id.strip(),
            email=email.strip().lower(),
            display_name=(display_name or email).strip(),
            tier=tier,
            tenant_id=tenant_id,
        )
        self.session.add(principal)
        flush_or_conflict(self.session, "Principal creation failed due to a constraint violation")
        return principal

    def update(self, principal: Principal, **fields: Any) -> Principal:
        for k, v in fields.items():
            if k in _MUTABLE_FIELDS:
                setattr(principal, k, v)
        flush_or_conflict(self.session, "Principal update failed due to a constraint violation")
        return principal

    def delete(self, principal: Principal) -> None:
        self.session.delete(principal)
        self.session.flush()

    def list_all(self) -> Sequence[Principal]:
        stmt = select(Principal).order_by(Principal.created_at, Principal.email)
        return list(self.session.execute(stmt).scalars().all())

    def list_by_tenant(self, tenant_id: str, tier: Optional[str] = None) -> Sequence[Principal]:
        stmt = select(Principal).where(Principal.tenant_id == tenant_id)
        if tier is not None:
            stmt = stmt.where(Principal.tier == tier)
        stmt = stmt.order_by(Principal.created_at, Principal.email)
        return list(self.session.execute(stmt).scalars().all())

    def list_unbound(self) -> Sequence[Principal]:
        stmt = (
            select(Principal)
            .where(Principal.tier != Tier.OPERATOR.value, Principal.tenant_id.is_(None))
            .order_by(Principal.created_at)
        )
        return list(self.session.execute(stmt).scalars().all())
