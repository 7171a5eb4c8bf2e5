"""
Assignment ledger: validated grants and revocations of resource visibility.

Behavior:
    grant(resource_id, grantee, granted_by) -> Assignment
    - Grantee shape is checked first: exactly one of principal/tenant, else InvalidAssignmentError.
      Nothing is read or written before that check.
    - Actor, resource and grantee must exist (NotFoundError).
    - Operators may grant anything to anyone. Tenant-leads, when enabled, may grant
      resources they can see (or created) to their own tenant or to members of it.
      Everyone else gets ForbiddenError.
    - Each call inserts a new row; existing grants are never overwritten.

    revoke(assignment_id, revoked_by)
    - Operators may revoke any grant. A tenant-lead may revoke a grant made from
      inside their tenant to a grantee inside their tenant.

    list_for_resource(resource_id, viewer_id=None) -> newest-first assignments
    - An unknown resource yields an empty list.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Union

from portal.core.contracts import PortalStore
from portal.core.errors import ForbiddenError, NotFoundError
from portal.core.logging import get_logger
from portal.core.types import Grantee, PrincipalGrantee, TenantGrantee, Tier, coerce_grantee
from portal.services.access_resolver import AccessResolver
from portal.services.membership import MembershipGraph, Standing

__all__ = ["AssignmentLedger"]

log = get_logger(__name__)


class AssignmentLedger:
    def __init__(
        self,
        store: PortalStore,
        membership: Optional[MembershipGraph] = None,
        resolver: Optional[AccessResolver] = None,
        *,
        tenant_leads_may_grant: bool = True,
    ) -> None:
        self.store = store
        self.membership = membership or MembershipGraph(store)
        self.resolver = resolver or AccessResolver(store, self.membership)
        self.tenant_leads_may_grant = tenant_leads_may_grant

    # -------------------------------
    # Grant
    # -------------------------------

    def grant(
        self,
        resource_id: str,
        grantee: Union[Grantee, Mapping[str, Any], None],
        granted_by: str,
    ):
        target = coerce_grantee(grantee)
        actor = self.membership.standing(granted_by)

        resource = self.store.resources.get_by_id(resource_id)
        if resource is None:
            raise NotFoundError("Resource not found", details={"resource_id": resource_id})
        self._require_grantee(target)
        self._authorize_grant(actor, resource, target)

        with self.store.transaction():
            assignment = self.store.assignments.create(
                resource_id=resource.id, grantee=target, granted_by=actor.principal_id
            )

        log.info(
            "assignment granted",
            extra={
                "assignment_id": assignment.id,
                "resource_id": resource.id,
                "grantee_principal_id": getattr(target, "principal_id", None),
                "grantee_tenant_id": getattr(target, "tenant_id", None),
                "granted_by": actor.principal_id,
            },
        )
        return assignment

    def _require_grantee(self, target: Grantee) -> None:
        if isinstance(target, PrincipalGrantee):
            if self.store.principals.get_by_id(target.principal_id) is None:
                raise NotFoundError("Grantee principal not found", details={"principal_id": target.principal_id})
        elif self.store.tenants.get_by_id(target.tenant_id) is None:
            raise NotFoundError("Grantee tenant not found", details={"tenant_id": target.tenant_id})

    def _authorize_grant(self, actor: Standing, resource: Any, target: Grantee) -> None:
        if actor.is_operator:
            return
        if actor.tier is not Tier.TENANT_LEAD or not self.tenant_leads_may_grant:
            raise ForbiddenError("Only operators may grant access to resources")
        if actor.tenant_id is None:
            raise ForbiddenError("Tenant-lead has no tenant to grant within")

        if not self._inside_tenant(target, actor.tenant_id, members_only=True):
            raise ForbiddenError(
                "Tenant-leads may only grant to their own tenant or its members",
                details={"tenant_id": actor.tenant_id},
            )
        if resource.created_by != actor.principal_id and not self.resolver.can_view(actor.principal_id, resource.id):
            raise ForbiddenError("Tenant-leads may only grant resources visible to them")

    def _inside_tenant(self, target: Grantee, tenant_id: str, *, members_only: bool = False) -> bool:
        if isinstance(target, TenantGrantee):
            return target.tenant_id == tenant_id
        principal = self.store.principals.get_by_id(target.principal_id)
        if principal is None or principal.tenant_id != tenant_id:
            return False
        return principal.tier == Tier.MEMBER.value or not members_only

    # -------------------------------
    # Revoke
    # -------------------------------

    def revoke(self, assignment_id: str, revoked_by: str) -> None:
        actor = self.membership.standing(revoked_by)
        assignment = self.store.assignments.get_by_id(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found", details={"assignment_id": assignment_id})

        if not self._may_revoke(actor, assignment):
            raise ForbiddenError("Not allowed to revoke this assignment", details={"assignment_id": assignment_id})

        with self.store.transaction():
            self.store.assignments.delete(assignment)

        log.info(
            "assignment revoked",
            extra={"assignment_id": assignment_id, "resource_id": assignment.resource_id, "revoked_by": revoked_by},
        )

    def _may_revoke(self, actor: Standing, assignment: Any) -> bool:
        if actor.is_operator:
            return True
        if actor.tier is not Tier.TENANT_LEAD or actor.tenant_id is None:
            return False
        granter = self.store.principals.get_by_id(assignment.granted_by)
        granter_inside = granter is not None and (
            granter.id == actor.principal_id or granter.tenant_id == actor.tenant_id
        )
        return granter_inside and self._inside_tenant(assignment.grantee, actor.tenant_id)

    # -------------------------------
    # Listing / purging
    # -------------------------------

    def list_for_resource(self, resource_id: str, viewer_id: Optional[str] = None) -> List:
        """
        Newest-first grants of a resource.

        Non-operator viewers only see grants whose grantee lies inside their own tenant.
        """
        assignments = list(self.store.assignments.list_for_resource(resource_id))
        if viewer_id is None:
            return assignments
        viewer = self.membership.standing(viewer_id)
        if viewer.is_operator:
            return assignments
        if viewer.tenant_id is None:
            return [a for a in assignments if a.grantee_principal_id == viewer.principal_id]
        return [a for a in assignments if self._inside_tenant(a.grantee, viewer.tenant_id)]

    def purge_resources(self, resource_ids: Iterable[str]) -> int:
        """Stage removal of every grant of the given resources; callers own the transaction."""
        return self.store.assignments.delete_for_resources(resource_ids)
