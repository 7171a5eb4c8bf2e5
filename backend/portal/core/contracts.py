"""
Repository contracts (Protocols) for data access layers.

These Protocols define the minimal operations required by the services layer.
Concrete implementations can use SQLAlchemy or in-memory stores, as long as they
satisfy these interfaces.

Repository write methods stage changes only; they become durable when the
enclosing PortalStore.transaction() block exits without an exception.

Protocols:
- PrincipalRepo
- TenantRepo
- ResourceRepo
- AssignmentRepo
- MessageRepo
- PortalStore (the injected persistence context bundling the repos above)
- ObjectStore (external blob storage that signs retrieval URLs)
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    ContextManager,
    Iterable,
    Optional,
    Protocol,
    Sequence,
    Set,
    runtime_checkable,
)

if TYPE_CHECKING:
    # Imported only for type checking to avoid runtime import cycles
    from portal.core.types import Grantee
    from portal.models.assignment import Assignment
    from portal.models.message import Message
    from portal.models.principal import Principal
    from portal.models.resource import Resource
    from portal.models.tenant import Tenant

__all__ = [
    "PrincipalRepo",
    "TenantRepo",
    "ResourceRepo",
    "AssignmentRepo",
    "MessageRepo",
    "PortalStore",
    "ObjectStore",
]


# -------------------------------
# Principal Repository
# -------------------------------

@runtime_checkable
class PrincipalRepo(Protocol):
    """
    Contract for principal (account) data access.
    """

    def get_by_id(self, principal_id: str) -> Optional["Principal"]:
        """Fetch a principal by id."""
        raise NotImplementedError()

    def get_by_email(self, email: str) -> Optional["Principal"]:
        """Fetch a principal by email (case-insensitive)."""
        raise NotImplementedError()

    def create(
        self, *, principal_id: str, email: str, display_name: str, tier: str, tenant_id: Optional[str] = None
    ) -> "Principal":
        """Stage a new principal."""
        raise NotImplementedError()

    def update(self, principal: "Principal", **fields: Any) -> "Principal":
        """Stage changes to a principal."""
        raise NotImplementedError()

    def delete(self, principal: "Principal") -> None:
        """Stage deletion of a principal."""
        raise NotImplementedError()

    def list_all(self) -> Sequence["Principal"]:
        """All principals, oldest first."""
        raise NotImplementedError()

    def list_by_tenant(self, tenant_id: str, tier: Optional[str] = None) -> Sequence["Principal"]:
        """Principals bound to a tenant, optionally restricted to one tier."""
        raise NotImplementedError()

    def list_unbound(self) -> Sequence["Principal"]:
        """Non-operator principals with no tenant binding."""
        raise NotImplementedError()


# -------------------------------
# Tenant Repository
# -------------------------------

@runtime_checkable
class TenantRepo(Protocol):
    """
    Contract for tenant data access.
    """

    def get_by_id(self, tenant_id: str) -> Optional["Tenant"]:
        """Fetch a tenant by id."""
        raise NotImplementedError()

    def create(
        self,
        *,
        name: str,
        contact_email: str,
        contact_phone: Optional[str] = None,
        address: Optional[str] = None,
        status: str = "active",
    ) -> "Tenant":
        """Stage a new tenant."""
        raise NotImplementedError()

    def update(self, tenant: "Tenant", **fields: Any) -> "Tenant":
        """Stage changes to a tenant."""
        raise NotImplementedError()

    def delete(self, tenant: "Tenant") -> None:
        """Stage deletion of a tenant."""
        raise NotImplementedError()

    def list_all(self) -> Sequence["Tenant"]:
        """All tenants, newest first."""
        raise NotImplementedError()


# -------------------------------
# Resource Repository
# -------------------------------

@runtime_checkable
class ResourceRepo(Protocol):
    """
    Contract for file/news resource data access.
    """

    def get_by_id(self, resource_id: str) -> Optional["Resource"]:
        """Fetch a resource by id."""
        raise NotImplementedError()

    def create(self, *, kind: str, title: str, created_by: str, **metadata: Any) -> "Resource":
        """Stage a new resource."""
        raise NotImplementedError()

    def update(self, resource: "Resource", **fields: Any) -> "Resource":
        """Stage changes to a resource (status only in practice)."""
        raise NotImplementedError()

    def delete(self, resource: "Resource") -> None:
        """Stage deletion of a resource."""
        raise NotImplementedError()

    def list_all(self, kind: Optional[str] = None) -> Sequence["Resource"]:
        """All resources, optionally of one kind."""
        raise NotImplementedError()

    def list_by_ids(self, resource_ids: Iterable[str], kind: Optional[str] = None) -> Sequence["Resource"]:
        """Resources whose ids are in `resource_ids`, optionally of one kind."""
        raise NotImplementedError()

    def ids_created_by(self, principal_ids: Iterable[str]) -> Set[str]:
        """Ids of resources created by any of the given principals."""
        raise NotImplementedError()


# -------------------------------
# Assignment Repository
# -------------------------------

@runtime_checkable
class AssignmentRepo(Protocol):
    """
    Contract for the assignment (grant) table.
    """

    def get_by_id(self, assignment_id: str) -> Optional["Assignment"]:
        """Fetch an assignment by id."""
        raise NotImplementedError()

    def create(self, *, resource_id: str, grantee: "Grantee", granted_by: str) -> "Assignment":
        """Stage a new assignment for exactly one grantee."""
        raise NotImplementedError()

    def delete(self, assignment: "Assignment") -> None:
        """Stage deletion of one assignment."""
        raise NotImplementedError()

    def list_for_resource(self, resource_id: str) -> Sequence["Assignment"]:
        """Assignments of a resource, newest first."""
        raise NotImplementedError()

    def list_for_grantee(self, principal_id: str) -> Sequence["Assignment"]:
        """Direct assignments to one principal (tenant-wide grants excluded)."""
        raise NotImplementedError()

    def visible_resource_ids(self, principal_id: str, tenant_id: Optional[str]) -> Set[str]:
        """
        Ids of resources granted to the principal directly, or to `tenant_id`.

        When `tenant_id` is None the tenant clause is omitted entirely.
        """
        raise NotImplementedError()

    def delete_for_resources(self, resource_ids: Iterable[str]) -> int:
        """Stage deletion of every assignment of the given resources."""
        raise NotImplementedError()

    def delete_for_principals(self, principal_ids: Iterable[str]) -> int:
        """Stage deletion of assignments granted to or by the given principals."""
        raise NotImplementedError()

    def delete_for_tenant(self, tenant_id: str) -> int:
        """Stage deletion of tenant-wide assignments to `tenant_id`."""
        raise NotImplementedError()


# -------------------------------
# Message Repository
# -------------------------------

@runtime_checkable
class MessageRepo(Protocol):
    """
    Contract for direct messages.
    """

    def get_by_id(self, message_id: str) -> Optional["Message"]:
        raise NotImplementedError()

    def create(
        self, *, sender_id: str, recipient_id: str, body: str, subject: Optional[str] = None, kind: str = "direct"
    ) -> "Message":
        raise NotImplementedError()

    def update(self, message: "Message", **fields: Any) -> "Message":
        raise NotImplementedError()

    def delete(self, message: "Message") -> None:
        raise NotImplementedError()

    def list_inbox(self, recipient_id: str, offset: int = 0, limit: int = 50) -> Sequence["Message"]:
        """Messages received by a principal, newest first."""
        raise NotImplementedError()

    def list_outbox(self, sender_id: str, offset: int = 0, limit: int = 50) -> Sequence["Message"]:
        """Messages sent by a principal, newest first."""
        raise NotImplementedError()

    def delete_for_principals(self, principal_ids: Iterable[str]) -> int:
        """Stage deletion of messages sent or received by the given principals."""
        raise NotImplementedError()


# -------------------------------
# Store
# -------------------------------

@runtime_checkable
class PortalStore(Protocol):
    """
    The persistence context handed to every service constructor.

    transaction() is re-entrant: only the outermost block commits, and any
    exception rolls back everything staged since it was entered.
    """

    principals: PrincipalRepo
    tenants: TenantRepo
    resources: ResourceRepo
    assignments: AssignmentRepo
    messages: MessageRepo

    def transaction(self) -> ContextManager[Any]:
        raise NotImplementedError()


# -------------------------------
# Object Store (external)
# -------------------------------

@runtime_checkable
class ObjectStore(Protocol):
    """
    External blob storage; the core only ever asks it for signed URLs.
    """

    def signed_url(self, locator: str, expires_in: int) -> str:
        """Return a retrieval URL for `locator` valid for `expires_in` seconds."""
        raise NotImplementedError()
