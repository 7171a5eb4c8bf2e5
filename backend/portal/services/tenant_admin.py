"""
Tenant and account administration.

Operator mutations of the membership graph (tenant lifecycle, tier and tenant
changes, account removal), team management for tenant-leads within their own
tenant, plus the registration hook called when the identity provider reports
a new account.

Cascading deletions (tenant -> its principals -> their resources, grants and
messages) run inside one store transaction: either everything goes or nothing does.
Moving a principal out of a tenant drops the direct grants that tenant's lead
could make, so nothing granted inside one tenant follows a principal into another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Union

from portal.core.contracts import PortalStore
from portal.core.errors import ConflictError, ForbiddenError, NotFoundError
from portal.core.logging import get_logger
from portal.core.types import TenantStatus, Tier
from portal.services.membership import MembershipGraph, Standing

__all__ = ["DeletionSummary", "TenantAdminService"]

log = get_logger(__name__)

_OPERATOR_TENANT_FIELDS = frozenset({"name", "contact_email", "contact_phone", "address", "status"})
_LEAD_TENANT_FIELDS = frozenset({"contact_email", "contact_phone", "address"})
_REQUIRED_TENANT_FIELDS = frozenset({"name", "contact_email", "status"})


@dataclass
class DeletionSummary:
    principal_ids: List[str] = field(default_factory=list)
    resources_removed: int = 0
    assignments_removed: int = 0
    messages_removed: int = 0


class TenantAdminService:
    def __init__(self, store: PortalStore, membership: Optional[MembershipGraph] = None) -> None:
        self.store = store
        self.membership = membership or MembershipGraph(store)

    # -------------------------------
    # Guards
    # -------------------------------

    def _require_operator(self, actor_id: str) -> Standing:
        actor = self.membership.standing(actor_id)
        if not actor.is_operator:
            raise ForbiddenError("Operator privileges required")
        return actor

    def _tenant(self, tenant_id: str):
        tenant = self.store.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found", details={"tenant_id": tenant_id})
        return tenant

    def _principal(self, principal_id: str):
        principal = self.store.principals.get_by_id(principal_id)
        if principal is None:
            raise NotFoundError("Principal not found", details={"principal_id": principal_id})
        return principal

    # -------------------------------
    # Tenants
    # -------------------------------

    def create_tenant(
        self,
        actor_id: str,
        *,
        name: str,
        contact_email: str,
        contact_phone: Optional[str] = None,
        address: Optional[str] = None,
        status: Union[TenantStatus, str] = TenantStatus.ACTIVE,
    ):
        self._require_operator(actor_id)
        with self.store.transaction():
            tenant = self.store.tenants.create(
                name=name,
                contact_email=contact_email,
                contact_phone=contact_phone,
                address=address,
                status=TenantStatus(status).value,
            )
        log.info("tenant created", extra={"tenant_id": tenant.id, "actor_id": actor_id})
        return tenant

    def update_tenant(self, actor_id: str, tenant_id: str, **fields: Any):
        actor = self.membership.standing(actor_id)
        tenant = self._tenant(tenant_id)
        if actor.is_operator:
            allowed = _OPERATOR_TENANT_FIELDS
        elif actor.tier is Tier.TENANT_LEAD and actor.tenant_id == tenant.id:
            allowed = _LEAD_TENANT_FIELDS
        else:
            raise ForbiddenError("Not allowed to update this tenant", details={"tenant_id": tenant_id})

        # None clears a field; only the optional contact fields may be cleared
        changes = dict(fields)
        rejected = set(changes) - allowed
        if rejected:
            raise ForbiddenError("Not allowed to change these fields", details={"fields": sorted(rejected)})
        for required in _REQUIRED_TENANT_FIELDS & set(changes):
            if changes[required] is None:
                raise ValueError(f"{required} cannot be cleared")
        if "status" in changes:
            changes["status"] = TenantStatus(changes["status"]).value

        with self.store.transaction():
            self.store.tenants.update(tenant, **changes)
        return tenant

    def get_tenant(self, actor_id: str, tenant_id: str):
        actor = self.membership.standing(actor_id)
        tenant = self._tenant(tenant_id)
        if not actor.is_operator and actor.tenant_id != tenant.id:
            raise NotFoundError("Tenant not found", details={"tenant_id": tenant_id})
        return tenant

    def list_tenants(self, actor_id: str) -> List:
        actor = self.membership.standing(actor_id)
        if actor.is_operator:
            return list(self.store.tenants.list_all())
        if actor.tenant_id is None:
            return []
        tenant = self.store.tenants.get_by_id(actor.tenant_id)
        return [tenant] if tenant is not None else []

    def roster(self, actor_id: str, tenant_id: str) -> List:
        """Members of a tenant (lead excluded), for operators and that tenant's lead."""
        actor = self.membership.standing(actor_id)
        tenant = self._tenant(tenant_id)
        if not (actor.is_operator or (actor.tier is Tier.TENANT_LEAD and actor.tenant_id == tenant.id)):
            raise ForbiddenError("Not allowed to list this tenant's members", details={"tenant_id": tenant_id})
        return list(self.store.principals.list_by_tenant(tenant.id, tier=Tier.MEMBER.value))

    def delete_tenant(self, actor_id: str, tenant_id: str) -> DeletionSummary:
        self._require_operator(actor_id)
        tenant = self._tenant(tenant_id)
        principals = list(self.store.principals.list_by_tenant(tenant.id))

        with self.store.transaction():
            summary = self._purge_principals(principals)
            summary.assignments_removed += self.store.assignments.delete_for_tenant(tenant.id)
            self.store.tenants.delete(tenant)

        log.info(
            "tenant deleted",
            extra={
                "tenant_id": tenant_id,
                "actor_id": actor_id,
                "principals_removed": len(summary.principal_ids),
                "resources_removed": summary.resources_removed,
                "assignments_removed": summary.assignments_removed,
            },
        )
        return summary

    # -------------------------------
    # Principals
    # -------------------------------

    def register_principal(
        self,
        principal_id: str,
        email: str,
        display_name: Optional[str] = None,
        tenant_id: Optional[str] = None,
    ):
        """
        Record a newly registered identity as a member, optionally bound to a tenant.
        """
        if self.store.principals.get_by_id(principal_id) is not None:
            raise ConflictError("Principal already registered", details={"principal_id": principal_id})
        if self.store.principals.get_by_email(email) is not None:
            raise ConflictError("Email already registered", details={"email": email})
        if tenant_id is not None:
            self._tenant(tenant_id)

        with self.store.transaction():
            principal = self.store.principals.create(
                principal_id=principal_id,
                email=email,
                display_name=display_name or email,
                tier=Tier.MEMBER.value,
                tenant_id=tenant_id,
            )
        if tenant_id is None:
            log.warning("principal registered without a tenant", extra={"principal_id": principal_id})
        else:
            log.info("principal registered", extra={"principal_id": principal_id, "tenant_id": tenant_id})
        return principal

    def set_membership(
        self,
        actor_id: str,
        principal_id: str,
        tier: Union[Tier, str],
        tenant_id: Optional[str] = None,
    ):
        """
        Change a principal's tier and tenant binding, keeping tenant.lead_id in sync.
        """
        self._require_operator(actor_id)
        principal = self._principal(principal_id)
        new_tier = Tier(tier)

        if new_tier is Tier.OPERATOR:
            if tenant_id is not None:
                raise ValueError("operators cannot be bound to a tenant")
            new_tenant = None
        else:
            if tenant_id is None:
                raise ValueError(f"tier {new_tier.value} requires a tenant_id")
            new_tenant = self._tenant(tenant_id)
            if new_tier is Tier.TENANT_LEAD and new_tenant.lead_id not in (None, principal.id):
                raise ConflictError(
                    "Tenant already has a lead",
                    details={"tenant_id": tenant_id, "lead_id": new_tenant.lead_id},
                )

        new_tenant_id = new_tenant.id if new_tenant is not None else None
        grants_dropped = 0
        with self.store.transaction():
            if principal.tenant_id != new_tenant_id:
                grants_dropped = self._drop_lead_grants(principal)
            self._release_lead_seat(principal)
            self.store.principals.update(principal, tier=new_tier.value, tenant_id=new_tenant_id)
            if new_tier is Tier.TENANT_LEAD:
                self.store.tenants.update(new_tenant, lead_id=principal.id)

        log.info(
            "membership changed",
            extra={
                "principal_id": principal_id,
                "tier": new_tier.value,
                "tenant_id": tenant_id,
                "actor_id": actor_id,
                "assignments_removed": grants_dropped,
            },
        )
        return principal

    def add_team_member(
        self,
        actor_id: str,
        tenant_id: str,
        principal_id: str,
        email: str,
        display_name: Optional[str] = None,
    ):
        """
        Put a member on a tenant's team: an operator for any tenant, a tenant-lead
        for their own. An unknown id is registered as a new member; an existing
        unbound member is bound. Anyone else already registered is a Conflict.
        """
        actor = self.membership.standing(actor_id)
        tenant = self._tenant(tenant_id)
        if not (actor.is_operator or (actor.tier is Tier.TENANT_LEAD and actor.tenant_id == tenant.id)):
            raise ForbiddenError("Not allowed to add members to this tenant", details={"tenant_id": tenant_id})

        existing = self.store.principals.get_by_id(principal_id)
        if existing is None:
            principal = self.register_principal(principal_id, email, display_name=display_name, tenant_id=tenant.id)
        else:
            if existing.tier != Tier.MEMBER.value or existing.tenant_id is not None:
                raise ConflictError(
                    "Principal already belongs to a tenant or holds another tier",
                    details={"principal_id": principal_id},
                )
            with self.store.transaction():
                self._drop_lead_grants(existing)
                principal = self.store.principals.update(existing, tenant_id=tenant.id)

        log.info("team member added", extra={"principal_id": principal_id, "tenant_id": tenant.id, "actor_id": actor_id})
        return principal

    def rename(self, actor_id: str, principal_id: str, display_name: str):
        actor = self.membership.standing(actor_id)
        principal = self._principal(principal_id)
        if actor.principal_id != principal.id and not self._manages(actor, principal):
            raise ForbiddenError("Not allowed to rename this account", details={"principal_id": principal_id})
        if not isinstance(display_name, str) or not display_name.strip():
            raise ValueError("display_name must be a non-empty string")
        with self.store.transaction():
            self.store.principals.update(principal, display_name=display_name.strip())
        return principal

    def get_principal(self, actor_id: str, principal_id: str):
        actor = self.membership.standing(actor_id)
        principal = self._principal(principal_id)
        if not self._can_see_principal(actor, principal):
            raise NotFoundError("Principal not found", details={"principal_id": principal_id})
        return principal

    def list_principals(self, actor_id: str) -> List:
        actor = self.membership.standing(actor_id)
        if actor.is_operator:
            return list(self.store.principals.list_all())
        if actor.tier is Tier.TENANT_LEAD and actor.tenant_id is not None:
            return list(self.store.principals.list_by_tenant(actor.tenant_id))
        return [self._principal(actor.principal_id)]

    def delete_principal(self, actor_id: str, principal_id: str) -> DeletionSummary:
        """Operators may delete anyone; a tenant-lead only members of their own tenant."""
        actor = self.membership.standing(actor_id)
        principal = self._principal(principal_id)
        if not self._manages(actor, principal):
            raise ForbiddenError("Not allowed to delete this account", details={"principal_id": principal_id})
        with self.store.transaction():
            summary = self._purge_principals([principal])
        log.info("principal deleted", extra={"principal_id": principal_id, "actor_id": actor_id})
        return summary

    # -------------------------------
    # Internals
    # -------------------------------

    @staticmethod
    def _can_see_principal(actor: Standing, principal: Any) -> bool:
        if actor.is_operator or actor.principal_id == principal.id:
            return True
        return actor.tier is Tier.TENANT_LEAD and actor.tenant_id is not None and actor.tenant_id == principal.tenant_id

    @staticmethod
    def _manages(actor: Standing, principal: Any) -> bool:
        if actor.is_operator:
            return True
        return (
            actor.tier is Tier.TENANT_LEAD
            and actor.tenant_id is not None
            and principal.tenant_id == actor.tenant_id
            and principal.tier == Tier.MEMBER.value
        )

    def _drop_lead_grants(self, principal: Any) -> int:
        """Stage removal of direct grants to `principal` not made by an operator."""
        removed = 0
        for assignment in self.store.assignments.list_for_grantee(principal.id):
            granter = self.store.principals.get_by_id(assignment.granted_by)
            if granter is not None and granter.tier == Tier.OPERATOR.value:
                continue
            self.store.assignments.delete(assignment)
            removed += 1
        return removed

    def _release_lead_seat(self, principal: Any) -> None:
        if principal.tier != Tier.TENANT_LEAD.value or principal.tenant_id is None:
            return
        tenant = self.store.tenants.get_by_id(principal.tenant_id)
        if tenant is not None and tenant.lead_id == principal.id:
            self.store.tenants.update(tenant, lead_id=None)

    def _purge_principals(self, principals: Iterable[Any]) -> DeletionSummary:
        """Stage removal of principals and everything that references them."""
        principals = list(principals)
        ids = [p.id for p in principals]
        summary = DeletionSummary(principal_ids=ids)
        if not ids:
            return summary

        created = self.store.resources.ids_created_by(ids)
        summary.assignments_removed += self.store.assignments.delete_for_resources(created)
        summary.assignments_removed += self.store.assignments.delete_for_principals(ids)
        summary.messages_removed += self.store.messages.delete_for_principals(ids)
        for resource_id in sorted(created):
            resource = self.store.resources.get_by_id(resource_id)
            if resource is not None:
                self.store.resources.delete(resource)
                summary.resources_removed += 1
        for principal in principals:
            self._release_lead_seat(principal)
            self.store.principals.delete(principal)
        return summary
