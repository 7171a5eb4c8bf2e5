"""
Access resolver: which resources may a principal see?

Algorithm, for principal P with tier T and tenant M(P):
  - T == operator: every resource, archived ones included.
  - otherwise:     active resources with an assignment to P directly, or to
                   M(P) when P has a tenant. An unbound member/lead only gets
                   its direct grants; the tenant clause is never built with a
                   missing tenant id.
The result is de-duplicated; ordering is left to callers.
"""

from __future__ import annotations

from typing import List, Optional, Set, Union

from portal.core.contracts import PortalStore
from portal.core.types import ResourceKind, ResourceStatus
from portal.services.membership import MembershipGraph, Standing

__all__ = ["AccessResolver"]


def _kind_value(kind: Union[ResourceKind, str, None]) -> Optional[str]:
    if kind is None:
        return None
    return ResourceKind(kind).value


class AccessResolver:
    def __init__(self, store: PortalStore, membership: Optional[MembershipGraph] = None) -> None:
        self.store = store
        self.membership = membership or MembershipGraph(store)

    def resolve_visible(self, principal_id: str, kind: Union[ResourceKind, str, None] = None) -> List:
        """
        Return the resources visible to `principal_id`, optionally of one kind.

        Raises:
            NotFoundError: if the principal does not exist.
        """
        standing = self.membership.standing(principal_id)
        kind_value = _kind_value(kind)
        if standing.is_operator:
            return list(self.store.resources.list_all(kind=kind_value))

        ids = self._granted_ids(standing)
        resources = self.store.resources.list_by_ids(ids, kind=kind_value)
        seen: Set[str] = set()
        visible = []
        for r in resources:
            if r.id in seen or r.status != ResourceStatus.ACTIVE.value:
                continue
            seen.add(r.id)
            visible.append(r)
        return visible

    def can_view(self, principal_id: str, resource_id: str) -> bool:
        standing = self.membership.standing(principal_id)
        resource = self.store.resources.get_by_id(resource_id)
        if resource is None:
            return False
        if standing.is_operator:
            return True
        if resource.status != ResourceStatus.ACTIVE.value:
            return False
        return resource.id in self._granted_ids(standing)

    def _granted_ids(self, standing: Standing) -> Set[str]:
        return set(self.store.assignments.visible_resource_ids(standing.principal_id, standing.tenant_id))
