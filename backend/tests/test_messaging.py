import itertools

import pytest

from fakes import InMemoryStore
from portal.core.errors import ForbiddenError, IntegrityViolationError, NotFoundError
from portal.core.types import Tier
from portal.services.membership import MembershipGraph
from portal.services.messaging import MessageService, MessagingAuthorizer, is_permitted


@pytest.mark.parametrize(
    "other,same_tenant",
    list(itertools.product(list(Tier), [True, False])),
)
def test_operator_reaches_and_is_reached_by_everyone(other, same_tenant):
    assert is_permitted(Tier.OPERATOR, other, same_tenant) is True
    assert is_permitted(other, Tier.OPERATOR, same_tenant) is True


def test_decision_table():
    assert is_permitted(Tier.TENANT_LEAD, Tier.MEMBER, True) is True
    assert is_permitted(Tier.MEMBER, Tier.TENANT_LEAD, True) is True
    assert is_permitted(Tier.TENANT_LEAD, Tier.MEMBER, False) is False
    assert is_permitted(Tier.MEMBER, Tier.TENANT_LEAD, False) is False
    assert is_permitted(Tier.TENANT_LEAD, Tier.TENANT_LEAD, True) is False
    assert is_permitted(Tier.TENANT_LEAD, Tier.TENANT_LEAD, False) is False
    assert is_permitted(Tier.MEMBER, Tier.MEMBER, True) is False
    assert is_permitted(Tier.MEMBER, Tier.MEMBER, False) is False


def test_can_message_over_membership(portal):
    auth = MessagingAuthorizer(MembershipGraph(portal.store))

    for someone in ["acme-lead", "alice", "gina", "globex-lead"]:
        assert auth.can_message("op", someone)
        assert auth.can_message(someone, "op")

    assert auth.can_message("acme-lead", "alice")
    assert auth.can_message("bob", "acme-lead")
    assert not auth.can_message("acme-lead", "gina")
    assert not auth.can_message("alice", "bob")
    assert not auth.can_message("acme-lead", "globex-lead")


def test_can_message_unknown_principal(portal):
    auth = MessagingAuthorizer(MembershipGraph(portal.store))
    with pytest.raises(NotFoundError):
        auth.can_message("alice", "ghost")
    with pytest.raises(NotFoundError):
        auth.can_message("ghost", "alice")


def test_unbound_lead_and_member_are_not_same_tenant():
    store = InMemoryStore()
    store.add_principal("lead", Tier.TENANT_LEAD)
    store.add_principal("member", Tier.MEMBER)
    auth = MessagingAuthorizer(MembershipGraph(store))
    assert not auth.can_message("lead", "member")


def test_send_and_mailboxes(portal):
    svc = MessageService(portal.store)
    m1 = svc.send("alice", "acme-lead", "Hi lead", subject="Question")
    m2 = svc.send("op", "alice", "Welcome")

    assert m1.kind == "direct" and m1.subject == "Question"
    assert [m.id for m in svc.inbox("alice")] == [m2.id]
    assert [m.id for m in svc.outbox("alice")] == [m1.id]
    assert [m.id for m in svc.inbox("acme-lead")] == [m1.id]


def test_denied_send_is_forbidden_and_not_stored(portal):
    svc = MessageService(portal.store)
    with pytest.raises(ForbiddenError):
        svc.send("alice", "bob", "psst")
    assert portal.store.messages.rows == {}


def test_empty_body_rejected(portal):
    with pytest.raises(ValueError):
        MessageService(portal.store).send("op", "alice", "   ")


def test_broadcast_reaches_each_member(portal):
    svc = MessageService(portal.store)
    sent = svc.broadcast_to_tenant("acme-lead", "All hands at 10")

    assert sorted(m.recipient_id for m in sent) == ["alice", "bob"]
    assert all(m.kind == "broadcast" for m in sent)
    assert svc.inbox("gina") == []


def test_broadcast_requires_lead(portal):
    svc = MessageService(portal.store)
    with pytest.raises(ForbiddenError):
        svc.broadcast_to_tenant("alice", "hello")
    with pytest.raises(ForbiddenError):
        svc.broadcast_to_tenant("op", "hello")


def test_announcement_to_one_tenant(portal):
    svc = MessageService(portal.store)
    sent = svc.announce("op", "Maintenance tonight", subject="Heads up", tenant_id=portal.acme.id)

    assert sorted(m.recipient_id for m in sent) == ["acme-lead", "alice", "bob"]
    assert all(m.kind == "announcement" and m.sender_id == "op" for m in sent)
    assert svc.inbox("gina") == []


def test_announcement_to_everyone_skips_operators(portal):
    portal.store.add_principal("op2", Tier.OPERATOR)
    sent = MessageService(portal.store).announce("op", "New portal release")

    recipients = sorted(m.recipient_id for m in sent)
    assert recipients == sorted(["acme-lead", "alice", "bob", "globex-lead", "gina", "gus"])


def test_announcement_guards(portal):
    svc = MessageService(portal.store)
    with pytest.raises(ForbiddenError):
        svc.announce("acme-lead", "hello")
    with pytest.raises(NotFoundError):
        svc.announce("op", "hello", tenant_id="missing")
    with pytest.raises(ValueError):
        svc.announce("op", " ")
    assert portal.store.messages.rows == {}


def test_broadcast_from_unbound_lead():
    store = InMemoryStore()
    store.add_principal("lead", Tier.TENANT_LEAD)
    with pytest.raises(IntegrityViolationError):
        MessageService(store).broadcast_to_tenant("lead", "hello")


def test_mark_read_recipient_only(portal):
    svc = MessageService(portal.store)
    m = svc.send("alice", "acme-lead", "ping")

    with pytest.raises(ForbiddenError):
        svc.mark_read(m.id, "alice")
    with pytest.raises(NotFoundError):
        svc.mark_read(m.id, "gina")

    read = svc.mark_read(m.id, "acme-lead")
    assert read.read_at is not None
    first = read.read_at
    assert svc.mark_read(m.id, "acme-lead").read_at == first


def test_delete_by_participant_only(portal):
    svc = MessageService(portal.store)
    m = svc.send("op", "gina", "note")

    with pytest.raises(NotFoundError):
        svc.delete(m.id, "alice")
    svc.delete(m.id, "gina")
    assert svc.inbox("gina") == []
    with pytest.raises(NotFoundError):
        svc.delete(m.id, "op")
