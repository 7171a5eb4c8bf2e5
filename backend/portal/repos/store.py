"""
SqlAlchemyStore: the PortalStore implementation bound to one Session.

All repositories share the session, so everything staged inside one
transaction() block commits or rolls back together.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from portal.repos.assignment_repo import SqlAlchemyAssignmentRepo
from portal.repos.message_repo import SqlAlchemyMessageRepo
from portal.repos.principal_repo import SqlAlchemyPrincipalRepo
from portal.repos.resource_repo import SqlAlchemyResourceRepo
from portal.repos.tenant_repo import SqlAlchemyTenantRepo

__all__ = ["SqlAlchemyStore"]


class SqlAlchemyStore:
    def __init__(self, session: Session) -> None:
        if not isinstance(session, Session):
            raise TypeError("session must be an instance of sqlalchemy.orm.Session")
        self.session = session
        self.principals = SqlAlchemyPrincipalRepo(session)
        self.tenants = SqlAlchemyTenantRepo(session)
        self.resources = SqlAlchemyResourceRepo(session)
        self.assignments = SqlAlchemyAssignmentRepo(session)
        self.messages = SqlAlchemyMessageRepo(session)
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator["SqlAlchemyStore"]:
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self.session.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            try:
                self.session.commit()
            except BaseException:
                self.session.rollback()
                raise
