"""
SQLAlchemy-based Resource repository.

Files and news items live in one table discriminated by `kind`.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from portal.models.resource import Resource
from portal.repos._flush import flush_or_conflict

__all__ = ["SqlAlchemyResourceRepo"]

_METADATA_FIELDS = frozenset(
    {"description", "original_filename", "content_type", "size_bytes", "storage_locator", "body"}
)


class SqlAlchemyResourceRepo:
    """
    Concrete Resource repository using SQLAlchemy ORM.
    """

    def __init__(self, session: Session) -> None:
        if not isinstance(session, Session):
            raise TypeError("session must be an instance of sqlalchemy.orm.Session")
        self.session = session

    def get_by_id(self, resource_id: str) -> Optional[Resource]:
        return self.session.get(Resource, str(resource_id))

    def create(self, *, kind: str, title: str, created_by: str, **metadata: Any) -> Resource:
        if not isinstance(title, str) or not title.strip():
            raise ValueError("title must be a non-empty string")
        unknown = set(metadata) - _METADATA_FIELDS
        if unknown:
            raise ValueError(f"Unknown resource fields: {sorted(unknown)}")

        resource = Resource(kind=kind, title=title.strip(), created_by=created_by, **metadata)
        self.session.add(resource)
        flush_or_conflict(self.session, "Resource creation failed due to a constraint violation")
        return resource

    def update(self, resource: Resource, **fields: Any) -> Resource:
        # Resources are immutable apart from their status
        if "status" in fields:
            resource.status = fields["status"]
        self.session.flush()
        return resource

    def delete(self, resource: Resource) -> None:
        self.session.delete(resource)
        self.session.flush()

    def list_all(self, kind: Optional[str] = None) -> Sequence[Resource]:
        stmt = select(Resource)
        if kind is not None:
            stmt = stmt.where(Resource.kind == kind)
        stmt = stmt.order_by(Resource.created_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    def list_by_ids(self, resource_ids: Iterable[str], kind: Optional[str] = None) -> Sequence[Resource]:
        ids = list(resource_ids)
        if not ids:
            return []
        stmt = select(Resource).where(Resource.id.in_(ids))
        if kind is not None:
            stmt = stmt.where(Resource.kind == kind)
        stmt = stmt.order_by(Resource.created_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    def ids_created_by(self, principal_ids: Iterable[str]) -> Set[str]:
        ids = list(principal_ids)
        if not ids:
            return set()
        stmt = select(Resource.id).where(Resource.created_by.in_(ids))
        return set(self.session.execute(stmt).scalars().all())
