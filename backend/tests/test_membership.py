import logging

import pytest

from fakes import InMemoryStore, seed_portal
from portal.core.errors import IntegrityViolationError, NotFoundError
from portal.core.types import Tier
from portal.services.membership import MembershipGraph


def test_tier_and_tenant_lookups(portal):
    graph = MembershipGraph(portal.store)

    assert graph.tier_of("op") is Tier.OPERATOR
    assert graph.tier_of("acme-lead") is Tier.TENANT_LEAD
    assert graph.tier_of("alice") is Tier.MEMBER

    assert graph.tenant_of("op") is None
    assert graph.tenant_of("alice") == portal.acme.id
    assert graph.tenant_of("globex-lead") == portal.globex.id


def test_unknown_principal_is_not_found(portal):
    graph = MembershipGraph(portal.store)
    with pytest.raises(NotFoundError):
        graph.tier_of("nobody")
    with pytest.raises(NotFoundError):
        graph.tenant_of("nobody")


def test_members_of_excludes_lead(portal):
    graph = MembershipGraph(portal.store)
    assert graph.members_of(portal.acme.id) == {"alice", "bob"}
    assert graph.lead_of(portal.acme.id) == "acme-lead"


def test_members_of_unknown_tenant(portal):
    with pytest.raises(NotFoundError):
        MembershipGraph(portal.store).members_of("missing-tenant")


def test_unbound_member_raises_integrity_violation_and_logs(caplog):
    store = InMemoryStore()
    store.add_principal("newbie", Tier.MEMBER)
    graph = MembershipGraph(store)

    with caplog.at_level(logging.ERROR, logger="portal.services.membership"):
        with pytest.raises(IntegrityViolationError):
            graph.tenant_of("newbie")

    assert any(getattr(r, "integrity_violation", False) for r in caplog.records)


def test_standing_never_raises_for_unbound():
    store = InMemoryStore()
    store.add_principal("newbie", Tier.MEMBER)
    standing = MembershipGraph(store).standing("newbie")
    assert standing.is_unbound
    assert standing.tenant_id is None
    assert not standing.is_operator


def test_operator_tenant_column_is_ignored():
    # An operator row carrying a stray tenant id still reads as unbound operator
    world = seed_portal()
    world.operator.tenant_id = world.acme.id
    standing = MembershipGraph(world.store).standing("op")
    assert standing.is_operator
    assert standing.tenant_id is None
