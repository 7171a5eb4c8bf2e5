import pytest

from portal.core.errors import ConflictError, ForbiddenError, NotFoundError
from portal.core.types import PrincipalGrantee, TenantGrantee, Tier
from portal.services.access_resolver import AccessResolver
from portal.services.assignment_ledger import AssignmentLedger
from portal.services.membership import MembershipGraph
from portal.services.messaging import MessageService
from portal.services.tenant_admin import TenantAdminService


def test_create_tenant_operator_only(portal):
    admin = TenantAdminService(portal.store)
    t = admin.create_tenant("op", name="Initech", contact_email="Ops@Initech.example")
    assert t.name == "Initech"
    assert t.contact_email == "ops@initech.example"
    assert t.lead_id is None

    with pytest.raises(ForbiddenError):
        admin.create_tenant("acme-lead", name="Rogue", contact_email="r@example.com")


def test_update_tenant_fields_by_tier(portal):
    admin = TenantAdminService(portal.store)

    admin.update_tenant("op", portal.acme.id, name="Acme Corp", status="inactive")
    assert portal.acme.name == "Acme Corp" and portal.acme.status == "inactive"

    admin.update_tenant("acme-lead", portal.acme.id, contact_phone="555-0100")
    assert portal.acme.contact_phone == "555-0100"

    with pytest.raises(ForbiddenError):
        admin.update_tenant("acme-lead", portal.acme.id, name="Renamed by lead")
    with pytest.raises(ForbiddenError):
        admin.update_tenant("acme-lead", portal.globex.id, contact_phone="1")
    with pytest.raises(ForbiddenError):
        admin.update_tenant("alice", portal.acme.id, contact_phone="1")


def test_get_and_list_tenants_scoped(portal):
    admin = TenantAdminService(portal.store)
    assert {t.id for t in admin.list_tenants("op")} == {portal.acme.id, portal.globex.id}
    assert [t.id for t in admin.list_tenants("alice")] == [portal.acme.id]
    assert admin.get_tenant("alice", portal.acme.id) is portal.acme
    with pytest.raises(NotFoundError):
        admin.get_tenant("alice", portal.globex.id)


def test_roster(portal):
    admin = TenantAdminService(portal.store)
    assert {p.id for p in admin.roster("acme-lead", portal.acme.id)} == {"alice", "bob"}
    assert {p.id for p in admin.roster("op", portal.globex.id)} == {"gina", "gus"}
    with pytest.raises(ForbiddenError):
        admin.roster("alice", portal.acme.id)
    with pytest.raises(ForbiddenError):
        admin.roster("acme-lead", portal.globex.id)


def test_register_principal(portal):
    admin = TenantAdminService(portal.store)
    bound = admin.register_principal("carol", "carol@example.com", tenant_id=portal.acme.id)
    unbound = admin.register_principal("dave", "dave@example.com", display_name="Dave")

    assert bound.tier == "member" and bound.tenant_id == portal.acme.id
    assert bound.display_name == "carol@example.com"
    assert unbound.tenant_id is None and unbound.display_name == "Dave"

    with pytest.raises(ConflictError):
        admin.register_principal("carol", "other@example.com")
    with pytest.raises(ConflictError):
        admin.register_principal("erin", "CAROL@example.com")
    with pytest.raises(NotFoundError):
        admin.register_principal("erin", "erin@example.com", tenant_id="missing")


def test_set_membership_binds_unbound_member(portal):
    admin = TenantAdminService(portal.store)
    admin.register_principal("newbie", "newbie@example.com")
    admin.set_membership("op", "newbie", Tier.MEMBER, portal.globex.id)
    assert MembershipGraph(portal.store).tenant_of("newbie") == portal.globex.id


def test_set_membership_one_lead_per_tenant(portal):
    admin = TenantAdminService(portal.store)
    with pytest.raises(ConflictError):
        admin.set_membership("op", "alice", "tenant-lead", portal.acme.id)

    # Demote the current lead, then promote alice
    admin.set_membership("op", "acme-lead", "member", portal.acme.id)
    assert portal.acme.lead_id is None
    admin.set_membership("op", "alice", "tenant-lead", portal.acme.id)
    assert portal.acme.lead_id == "alice"
    assert MembershipGraph(portal.store).lead_of(portal.acme.id) == "alice"


def test_set_membership_moves_lead_between_tenants(portal):
    admin = TenantAdminService(portal.store)
    initech = admin.create_tenant("op", name="Initech", contact_email="i@example.com")
    admin.set_membership("op", "acme-lead", "tenant-lead", initech.id)
    assert portal.acme.lead_id is None
    assert initech.lead_id == "acme-lead"


def test_set_membership_shape_rules(portal):
    admin = TenantAdminService(portal.store)
    with pytest.raises(ValueError):
        admin.set_membership("op", "alice", "operator", portal.acme.id)
    with pytest.raises(ValueError):
        admin.set_membership("op", "alice", "member", None)
    with pytest.raises(NotFoundError):
        admin.set_membership("op", "alice", "member", "missing")
    with pytest.raises(ForbiddenError):
        admin.set_membership("acme-lead", "alice", "member", portal.globex.id)

    promoted = admin.set_membership("op", "alice", "operator")
    assert promoted.tier == "operator" and promoted.tenant_id is None


def test_rename_self_operator_or_own_lead(portal):
    admin = TenantAdminService(portal.store)
    assert admin.rename("alice", "alice", " Alice A. ").display_name == "Alice A."
    assert admin.rename("op", "bob", "Robert").display_name == "Robert"
    assert admin.rename("acme-lead", "bob", "Bobby").display_name == "Bobby"
    with pytest.raises(ForbiddenError):
        admin.rename("acme-lead", "gina", "G")
    with pytest.raises(ForbiddenError):
        admin.rename("alice", "bob", "B")
    with pytest.raises(ForbiddenError):
        admin.rename("acme-lead", "globex-lead", "L")
    with pytest.raises(ValueError):
        admin.rename("alice", "alice", "")


def test_moving_member_drops_grants_made_by_old_lead(portal):
    store = portal.store
    ledger = AssignmentLedger(store)
    admin = TenantAdminService(store)
    lead_file = store.add_file("acme-lead", "acme-internal.pdf")
    op_file = store.add_file("op", "from-op.pdf")
    ledger.grant(lead_file.id, PrincipalGrantee("alice"), "acme-lead")
    op_grant = ledger.grant(op_file.id, PrincipalGrantee("alice"), "op")

    admin.set_membership("op", "alice", Tier.MEMBER, portal.globex.id)

    visible = {r.id for r in AccessResolver(store).resolve_visible("alice")}
    assert lead_file.id not in visible
    assert op_file.id in visible
    assert [a.id for a in store.assignments.list_for_grantee("alice")] == [op_grant.id]


def test_membership_change_within_tenant_keeps_grants(portal):
    store = portal.store
    lead_file = store.add_file("acme-lead", "acme-internal.pdf")
    grant = AssignmentLedger(store).grant(lead_file.id, PrincipalGrantee("alice"), "acme-lead")

    TenantAdminService(store).set_membership("op", "alice", Tier.MEMBER, portal.acme.id)
    assert store.assignments.get_by_id(grant.id) is not None


def test_failed_move_keeps_grants(portal, monkeypatch):
    store = portal.store
    lead_file = store.add_file("acme-lead", "acme-internal.pdf")
    grant = AssignmentLedger(store).grant(lead_file.id, PrincipalGrantee("alice"), "acme-lead")

    def boom(principal, **fields):
        raise RuntimeError("write failed")

    monkeypatch.setattr(store.principals, "update", boom)
    with pytest.raises(RuntimeError):
        TenantAdminService(store).set_membership("op", "alice", Tier.MEMBER, portal.globex.id)
    assert store.assignments.get_by_id(grant.id) is not None


def test_lead_adds_new_team_member(portal):
    admin = TenantAdminService(portal.store)
    carol = admin.add_team_member("acme-lead", portal.acme.id, "carol", "carol@example.com", display_name="Carol")
    assert carol.tier == "member" and carol.tenant_id == portal.acme.id
    assert "carol" in {p.id for p in admin.roster("acme-lead", portal.acme.id)}


def test_lead_binds_unbound_member(portal):
    admin = TenantAdminService(portal.store)
    admin.register_principal("dave", "dave@example.com")
    bound = admin.add_team_member("acme-lead", portal.acme.id, "dave", "dave@example.com")
    assert bound.tenant_id == portal.acme.id


def test_add_team_member_guards(portal):
    admin = TenantAdminService(portal.store)
    with pytest.raises(ForbiddenError):
        admin.add_team_member("acme-lead", portal.globex.id, "carol", "carol@example.com")
    with pytest.raises(ForbiddenError):
        admin.add_team_member("alice", portal.acme.id, "carol", "carol@example.com")
    with pytest.raises(ConflictError):
        admin.add_team_member("acme-lead", portal.acme.id, "gina", "gina@example.com")
    with pytest.raises(ConflictError):
        admin.add_team_member("acme-lead", portal.acme.id, "globex-lead", "gl@example.com")
    with pytest.raises(NotFoundError):
        admin.add_team_member("op", "missing", "carol", "carol@example.com")
    assert portal.store.principals.get_by_id("carol") is None

    added = admin.add_team_member("op", portal.globex.id, "carol", "carol@example.com")
    assert added.tenant_id == portal.globex.id


def test_clear_optional_tenant_contact_fields(portal):
    admin = TenantAdminService(portal.store)
    admin.update_tenant("acme-lead", portal.acme.id, contact_phone="555-0100", address="1 Main St")
    admin.update_tenant("acme-lead", portal.acme.id, contact_phone=None, address=None)
    assert portal.acme.contact_phone is None and portal.acme.address is None

    with pytest.raises(ValueError):
        admin.update_tenant("op", portal.acme.id, name=None)
    with pytest.raises(ValueError):
        admin.update_tenant("acme-lead", portal.acme.id, contact_email=None)


def test_principal_visibility(portal):
    admin = TenantAdminService(portal.store)
    assert len(admin.list_principals("op")) == 7
    assert {p.id for p in admin.list_principals("acme-lead")} == {"acme-lead", "alice", "bob"}
    assert [p.id for p in admin.list_principals("alice")] == ["alice"]

    assert admin.get_principal("acme-lead", "bob").id == "bob"
    with pytest.raises(NotFoundError):
        admin.get_principal("acme-lead", "gina")
    with pytest.raises(NotFoundError):
        admin.get_principal("alice", "bob")


def test_delete_principal_cascades(portal):
    store = portal.store
    ledger = AssignmentLedger(store)
    own = store.add_file("alice", "alice.pdf")
    shared = store.add_file("op", "shared.pdf")
    ledger.grant(own.id, PrincipalGrantee("gina"), "op")
    ledger.grant(shared.id, PrincipalGrantee("alice"), "op")
    keep = ledger.grant(shared.id, PrincipalGrantee("bob"), "op")
    MessageService(store).send("alice", "acme-lead", "bye")

    summary = TenantAdminService(store).delete_principal("op", "alice")

    assert summary.principal_ids == ["alice"]
    assert summary.resources_removed == 1
    assert store.principals.get_by_id("alice") is None
    assert store.resources.get_by_id(own.id) is None
    assert store.resources.get_by_id(shared.id) is not None
    assert list(store.assignments.rows) == [keep.id]
    assert store.messages.rows == {}


def test_delete_lead_frees_seat(portal):
    TenantAdminService(portal.store).delete_principal("op", "acme-lead")
    assert portal.acme.lead_id is None


def test_lead_deletes_only_own_members(portal):
    admin = TenantAdminService(portal.store)
    with pytest.raises(ForbiddenError):
        admin.delete_principal("acme-lead", "gina")
    with pytest.raises(ForbiddenError):
        admin.delete_principal("acme-lead", "acme-lead")
    with pytest.raises(ForbiddenError):
        admin.delete_principal("acme-lead", "globex-lead")
    with pytest.raises(ForbiddenError):
        admin.delete_principal("alice", "bob")

    summary = admin.delete_principal("acme-lead", "alice")
    assert summary.principal_ids == ["alice"]
    assert portal.store.principals.get_by_id("alice") is None


def test_delete_tenant_removes_everything_under_it(portal):
    store = portal.store
    ledger = AssignmentLedger(store)
    r_op = store.add_file("op", "for-acme.pdf")
    r_alice = store.add_file("alice", "alice.pdf")
    ledger.grant(r_op.id, TenantGrantee(portal.acme.id), "op")
    ledger.grant(r_alice.id, PrincipalGrantee("gina"), "op")
    globex_grant = ledger.grant(r_op.id, TenantGrantee(portal.globex.id), "op")
    MessageService(store).send("acme-lead", "alice", "hi")
    kept_msg = MessageService(store).send("op", "gina", "hi")

    summary = TenantAdminService(store).delete_tenant("op", portal.acme.id)

    assert sorted(summary.principal_ids) == ["acme-lead", "alice", "bob"]
    assert store.tenants.get_by_id(portal.acme.id) is None
    for pid in ["acme-lead", "alice", "bob"]:
        assert store.principals.get_by_id(pid) is None
    assert store.resources.get_by_id(r_alice.id) is None
    assert store.resources.get_by_id(r_op.id) is not None
    assert list(store.assignments.rows) == [globex_grant.id]
    assert list(store.messages.rows) == [kept_msg.id]
    assert store.principals.get_by_id("gina") is not None


def test_delete_tenant_is_all_or_nothing(portal, monkeypatch):
    store = portal.store

    def boom(tenant):
        raise RuntimeError("disk full")

    monkeypatch.setattr(store.tenants, "delete", boom)
    with pytest.raises(RuntimeError):
        TenantAdminService(store).delete_tenant("op", portal.acme.id)

    assert store.tenants.get_by_id(portal.acme.id) is not None
    assert {p.id for p in store.principals.list_by_tenant(portal.acme.id)} == {"acme-lead", "alice", "bob"}
    assert portal.acme.lead_id == "acme-lead"


def test_delete_tenant_guards(portal):
    admin = TenantAdminService(portal.store)
    with pytest.raises(ForbiddenError):
        admin.delete_tenant("acme-lead", portal.acme.id)
    with pytest.raises(NotFoundError):
        admin.delete_tenant("op", "missing")
