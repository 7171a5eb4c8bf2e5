"""
SQLAlchemy-based Assignment repository.

Assignments are insert/delete-only rows; there is no update path.
visible_resource_ids() is the single query behind the access resolver.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Set

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from portal.core.types import Grantee, PrincipalGrantee, TenantGrantee
from portal.models.assignment import Assignment
from portal.repos._flush import flush_or_conflict

__all__ = ["SqlAlchemyAssignmentRepo"]


class SqlAlchemyAssignmentRepo:
    """
    Concrete Assignment repository using SQLAlchemy ORM.
    """

    def __init__(self, session: Session) -> None:
        if not isinstance(session, Session):
            raise TypeError("session must be an instance of sqlalchemy.orm.Session")
        self.session = session

    def get_by_id(self, assignment_id: str) -> Optional[Assignment]:
        return self.session.get(Assignment, str(assignment_id))

    def create(self, *, resource_id: str, grantee: Grantee, granted_by: str) -> Assignment:
        if isinstance(grantee, PrincipalGrantee):
            assignment = Assignment(
                resource_id=resource_id, grantee_principal_id=grantee.principal_id, granted_by=granted_by
            )
        elif isinstance(grantee, TenantGrantee):
            assignment = Assignment(
                resource_id=resource_id, grantee_tenant_id=grantee.tenant_id, granted_by=granted_by
            )
        else:
            raise TypeError("grantee must be a PrincipalGrantee or TenantGrantee")
        self.session.add(assignment)
        flush_or_conflict(self.session, "Assignment creation failed due to a constraint violation")
        return assignment

    def delete(self, assignment: Assignment) -> None:
        self.session.delete(assignment)
        self.session.flush()

    def list_for_resource(self, resource_id: str) -> Sequence[Assignment]:
        stmt = (
            select(Assignment)
            .where(Assignment.resource_id == resource_id)
            .order_by(Assignment.created_at.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def list_for_grantee(self, principal_id: str) -> Sequence[Assignment]:
        stmt = (
            select(Assignment)
            .where(Assignment.grantee_principal_id == principal_id)
            .order_by(Assignment.created_at.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def visible_resource_ids(self, principal_id: str, tenant_id: Optional[str]) -> Set[str]:
        clauses = [Assignment.grantee_principal_id == principal_id]
        if tenant_id is not None:
            clauses.append(Assignment.grantee_tenant_id == tenant_id)
        stmt = select(Assignment.resource_id).where(or_(*clauses)).distinct()
        return set(self.session.execute(stmt).scalars().all())

    def delete_for_resources(self, resource_ids: Iterable[str]) -> int:
        ids = list(resource_ids)
        if not ids:
            return 0
        result = self.session.execute(delete(Assignment).where(Assignment.resource_id.in_(ids)))
        return int(result.rowcount or 0)

    def delete_for_principals(self, principal_ids: Iterable[str]) -> int:
        ids = list(principal_ids)
        if not ids:
            return 0
        result = self.session.execute(
            delete(Assignment).where(
                or_(Assignment.grantee_principal_id.in_(ids), Assignment.granted_by.in_(ids))
            )
        )
        return int(result.rowcount or 0)

    def delete_for_tenant(self, tenant_id: str) -> int:
        result = self.session.execute(delete(Assignment).where(Assignment.grantee_tenant_id == tenant_id))
        return int(result.rowcount or 0)
