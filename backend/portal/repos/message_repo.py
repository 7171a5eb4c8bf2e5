"""
SQLAlchemy-based Message repository.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from portal.models.message import Message
from portal.repos._flush import flush_or_conflict

__all__ = ["SqlAlchemyMessageRepo"]


class SqlAlchemyMessageRepo:
    def __init__(self, session: Session) -> None:
        if not isinstance(session, Session):
            raise TypeError("session must be an instance of sqlalchemy.orm.Session")
        self.session = session

    def get_by_id(self, message_id: str) -> Optional[Message]:
        return self.session.get(Message, str(message_id))

    def create(
        self,
        *,
        sender_id: str,
        recipient_id: str,
        body: str,
        subject: Optional[str] = None,
        kind: str = "direct",
    ) -> Message:
        message = Message(
            sender_id=sender_id,
            recipient_id=recipient_id,
            subject=subject,
            body=body,
            kind=kind,
        )
        self.session.add(message)
        flush_or_conflict(self.session, "Message creation failed due to a constraint violation")
        return message

    def update(self, message: Message, **fields: Any) -> Message:
        if "read_at" in fields:
            message.read_at = fields["read_at"]
        self.session.flush()
        return message

    def delete(self, message: Message) -> None:
        self.session.delete(message)
        self.session.flush()

    def list_inbox(self, recipient_id: str, offset: int = 0, limit: int = 50) -> Sequence[Message]:
        stmt = (
            select(Message)
            .where(Message.recipient_id == recipient_id)
            .order_by(Message.created_at.desc())
            .offset(max(0, int(offset)))
            .limit(max(1, int(limit)))
        )
        return list(self.session.execute(stmt).scalars().all())

    def list_outbox(self, sender_id: str, offset: int = 0, limit: int = 50) -> Sequence[Message]:
        stmt = (
            select(Message)
            .where(Message.sender_id == sender_id)
            .order_by(Message.created_at.desc())
            .offset(max(0, int(offset)))
            .limit(max(1, int(limit)))
        )
        return list(self.session.execute(stmt).scalars().all())

    def delete_for_principals(self, principal_ids: Iterable[str]) -> int:
        ids = list(principal_ids)
        if not ids:
            return 0
        result = self.session.execute(
            delete(Message).where(or_(Message.sender_id.in_(ids), Message.recipient_id.in_(ids)))
        )
        return int(result.rowcount or 0)
