"""Shared flush helper mapping constraint failures to ConflictError."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.core.errors import ConflictError


def flush_or_conflict(session: Session, message: str) -> None:
    """
    Flush pending changes so constraint violations surface at the call site.

    The enclosing store transaction owns the rollback.
    """
    try:
        session.flush()
    except IntegrityError as exc:
        raise ConflictError(message, details={"reason": str(exc.orig)}) from exc
