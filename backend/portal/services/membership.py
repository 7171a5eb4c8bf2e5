"""
Membership graph: the canonical answer to "who is this principal, and which tenant are they in".

Every authorization decision starts with one non-recursive lookup here
(standing()); nothing re-queries the principal table through itself.

Behavior:
    tier_of(principal_id)     -> Tier            (NotFoundError if unknown)
    tenant_of(principal_id)   -> tenant id|None  (None for operators; IntegrityViolationError if a
                                                  member/lead is unbound)
    members_of(tenant_id)     -> set of member ids (lead excluded; NotFoundError if unknown tenant)
    lead_of(tenant_id)        -> lead id|None
    standing(principal_id)    -> Standing        (never raises for unbound principals; logs instead)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Set

from portal.core.contracts import PortalStore
from portal.core.errors import IntegrityViolationError, NotFoundError
from portal.core.logging import get_logger
from portal.core.types import Tier

__all__ = ["Standing", "MembershipGraph"]

log = get_logger(__name__)


@dataclass(frozen=True)
class Standing:
    """A principal's tier and tenant binding as read in one lookup."""

    principal_id: str
    tier: Tier
    tenant_id: Optional[str]

    @property
    def is_operator(self) -> bool:
        return self.tier is Tier.OPERATOR

    @property
    def is_unbound(self) -> bool:
        """True for a member/lead missing its tenant binding."""
        return self.tier.requires_tenant and self.tenant_id is None


class MembershipGraph:
    """Read-only view over the principal and tenant tables."""

    def __init__(self, store: PortalStore) -> None:
        self.store = store

    def standing(self, principal_id: str) -> Standing:
        principal = self.store.principals.get_by_id(principal_id)
        if principal is None:
            raise NotFoundError("Principal not found", details={"principal_id": principal_id})
        tier = Tier(principal.tier)
        tenant_id = None if tier is Tier.OPERATOR else principal.tenant_id
        standing = Standing(principal_id=principal.id, tier=tier, tenant_id=tenant_id)
        if standing.is_unbound:
            log.error(
                "principal has no tenant binding",
                extra={"principal_id": principal.id, "tier": tier.value, "integrity_violation": True},
            )
        return standing

    def tier_of(self, principal_id: str) -> Tier:
        return self.standing(principal_id).tier

    def tenant_of(self, principal_id: str) -> Optional[str]:
        standing = self.standing(principal_id)
        if standing.is_unbound:
            raise IntegrityViolationError(
                f"Principal {principal_id} has tier {standing.tier.value} but no tenant",
                details={"principal_id": principal_id},
            )
        return standing.tenant_id

    def members_of(self, tenant_id: str) -> Set[str]:
        self._require_tenant(tenant_id)
        members = self.store.principals.list_by_tenant(tenant_id, tier=Tier.MEMBER.value)
        return {p.id for p in members}

    def lead_of(self, tenant_id: str) -> Optional[str]:
        tenant = self._require_tenant(tenant_id)
        return tenant.lead_id

    def _require_tenant(self, tenant_id: str):
        tenant = self.store.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found", details={"tenant_id": tenant_id})
        return tenant
