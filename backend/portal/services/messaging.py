"""
Messaging: who may address whom, and the message mailbox built on top of it.

MessagingAuthorizer is a pure decision table over (sender tier, recipient tier,
same tenant):

    operator     -> anyone          allowed
    anyone       -> operator        allowed
    tenant-lead  -> member          allowed when both share a tenant
    member       -> tenant-lead     allowed when both share a tenant
    everything else (lead <-> lead, member <-> member)  denied

MessageService persists messages; every direct send goes through the authorizer first.
Tenant broadcasts (lead to own members) and announcements (operator to tenants)
follow the same table by construction.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from portal.core.contracts import PortalStore
from portal.core.errors import ForbiddenError, IntegrityViolationError, NotFoundError
from portal.core.logging import get_logger
from portal.core.types import MessageKind, Tier
from portal.services.membership import MembershipGraph, Standing

__all__ = ["is_permitted", "MessagingAuthorizer", "MessageService"]

log = get_logger(__name__)

# (sender, recipient) -> same tenant required; pairs absent here are denied
_TENANT_PAIRS: Dict[Tuple[Tier, Tier], bool] = {
    (Tier.TENANT_LEAD, Tier.MEMBER): True,
    (Tier.MEMBER, Tier.TENANT_LEAD): True,
}


def is_permitted(sender_tier: Tier, recipient_tier: Tier, same_tenant: bool) -> bool:
    if sender_tier is Tier.OPERATOR or recipient_tier is Tier.OPERATOR:
        return True
    needs_same_tenant = _TENANT_PAIRS.get((sender_tier, recipient_tier))
    if needs_same_tenant is None:
        return False
    return same_tenant or not needs_same_tenant


class MessagingAuthorizer:
    def __init__(self, membership: MembershipGraph) -> None:
        self.membership = membership

    def can_message(self, sender_id: str, recipient_id: str) -> bool:
        """
        Raises:
            NotFoundError: if either principal is unknown.
        """
        sender = self.membership.standing(sender_id)
        recipient = self.membership.standing(recipient_id)
        return self.decide(sender, recipient)

    @staticmethod
    def decide(sender: Standing, recipient: Standing) -> bool:
        same_tenant = sender.tenant_id is not None and sender.tenant_id == recipient.tenant_id
        return is_permitted(sender.tier, recipient.tier, same_tenant)


class MessageService:
    def __init__(
        self,
        store: PortalStore,
        membership: Optional[MembershipGraph] = None,
        authorizer: Optional[MessagingAuthorizer] = None,
    ) -> None:
        self.store = store
        self.membership = membership or MembershipGraph(store)
        self.authorizer = authorizer or MessagingAuthorizer(self.membership)

    def send(self, sender_id: str, recipient_id: str, body: str, subject: Optional[str] = None):
        if not isinstance(body, str) or not body.strip():
            raise ValueError("body must be a non-empty string")
        if not self.authorizer.can_message(sender_id, recipient_id):
            raise ForbiddenError(
                "Messaging between these accounts is not allowed",
                details={"sender_id": sender_id, "recipient_id": recipient_id},
            )
        with self.store.transaction():
            message = self.store.messages.create(
                sender_id=sender_id,
                recipient_id=recipient_id,
                subject=subject,
                body=body,
                kind=MessageKind.DIRECT.value,
            )
        log.info("message sent", extra={"message_id": message.id, "sender_id": sender_id, "recipient_id": recipient_id})
        return message

    def broadcast_to_tenant(self, sender_id: str, body: str, subject: Optional[str] = None) -> List:
        """Send one message from a tenant-lead to every member of their tenant."""
        sender = self.membership.standing(sender_id)
        if sender.tier is not Tier.TENANT_LEAD:
            raise ForbiddenError("Only tenant-leads may broadcast to their tenant")
        if sender.tenant_id is None:
            raise IntegrityViolationError(
                f"Tenant-lead {sender_id} has no tenant", details={"principal_id": sender_id}
            )
        if not isinstance(body, str) or not body.strip():
            raise ValueError("body must be a non-empty string")

        members = self.store.principals.list_by_tenant(sender.tenant_id, tier=Tier.MEMBER.value)
        sent = []
        with self.store.transaction():
            for member in members:
                sent.append(
                    self.store.messages.create(
                        sender_id=sender_id,
                        recipient_id=member.id,
                        subject=subject,
                        body=body,
                        kind=MessageKind.BROADCAST.value,
                    )
                )
        log.info("tenant broadcast sent", extra={"sender_id": sender_id, "tenant_id": sender.tenant_id, "count": len(sent)})
        return sent

    def announce(
        self,
        sender_id: str,
        body: str,
        subject: Optional[str] = None,
        tenant_id: Optional[str] = None,
    ) -> List:
        """
        Operator announcement to every lead and member of one tenant, or of all
        tenants when tenant_id is None. Other operators are never addressed.
        """
        sender = self.membership.standing(sender_id)
        if not sender.is_operator:
            raise ForbiddenError("Only operators may send announcements")
        if not isinstance(body, str) or not body.strip():
            raise ValueError("body must be a non-empty string")

        if tenant_id is None:
            recipients = [p for p in self.store.principals.list_all() if p.tier != Tier.OPERATOR.value]
        else:
            if self.store.tenants.get_by_id(tenant_id) is None:
                raise NotFoundError("Tenant not found", details={"tenant_id": tenant_id})
            recipients = list(self.store.principals.list_by_tenant(tenant_id))

        sent = []
        with self.store.transaction():
            for recipient in recipients:
                sent.append(
                    self.store.messages.create(
                        sender_id=sender_id,
                        recipient_id=recipient.id,
                        subject=subject,
                        body=body,
                        kind=MessageKind.ANNOUNCEMENT.value,
                    )
                )
        log.info("announcement sent", extra={"sender_id": sender_id, "tenant_id": tenant_id, "count": len(sent)})
        return sent

    def inbox(self, principal_id: str, offset: int = 0, limit: int = 50) -> List:
        self.membership.standing(principal_id)
        return list(self.store.messages.list_inbox(principal_id, offset=offset, limit=limit))

    def outbox(self, principal_id: str, offset: int = 0, limit: int = 50) -> List:
        self.membership.standing(principal_id)
        return list(self.store.messages.list_outbox(principal_id, offset=offset, limit=limit))

    def mark_read(self, message_id: str, principal_id: str):
        message = self._participant_message(message_id, principal_id)
        if message.recipient_id != principal_id:
            raise ForbiddenError("Only the recipient may mark a message as read")
        if message.read_at is None:
            with self.store.transaction():
                self.store.messages.update(message, read_at=datetime.now(timezone.utc))
        return message

    def delete(self, message_id: str, principal_id: str) -> None:
        message = self._participant_message(message_id, principal_id)
        with self.store.transaction():
            self.store.messages.delete(message)

    def _participant_message(self, message_id: str, principal_id: str):
        message = self.store.messages.get_by_id(message_id)
        # Non-participants get the same answer as for a missing message
        if message is None or principal_id not in (message.sender_id, message.recipient_id):
            raise NotFoundError("Message not found", details={"message_id": message_id})
        return message
