import pytest

from portal.core.errors import InvalidAssignmentError
from portal.core.types import PrincipalGrantee, TenantGrantee, Tier, coerce_grantee, parse_grantee


def test_parse_grantee_variants():
    assert parse_grantee(principal_id="alice") == PrincipalGrantee("alice")
    assert parse_grantee(tenant_id=" t-1 ") == TenantGrantee("t-1")
    assert parse_grantee(principal_id="", tenant_id="t-1") == TenantGrantee("t-1")


@pytest.mark.parametrize(
    "principal_id,tenant_id",
    [("alice", "t-1"), (None, None), ("", "  ")],
)
def test_parse_grantee_requires_exactly_one(principal_id, tenant_id):
    with pytest.raises(InvalidAssignmentError) as ei:
        parse_grantee(principal_id, tenant_id)
    assert ei.value.status_code == 422
    assert ei.value.code == "invalid_assignment"


def test_coerce_grantee():
    g = TenantGrantee("t-1")
    assert coerce_grantee(g) is g
    assert coerce_grantee({"principal_id": "bob"}) == PrincipalGrantee("bob")
    with pytest.raises(InvalidAssignmentError):
        coerce_grantee(None)
    with pytest.raises(InvalidAssignmentError):
        coerce_grantee("bob")


def test_tier_values():
    assert Tier("tenant-lead") is Tier.TENANT_LEAD
    assert not Tier.OPERATOR.requires_tenant
    assert Tier.MEMBER.requires_tenant
