"""
Resource registry: files and news items, attributed to their creator.

Resources are immutable once registered apart from archiving. remove()
purges the resource's grants and the resource itself in one transaction, so
no reader ever sees a resource with dangling grants or grants pointing at a
missing resource.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, List, Mapping, Optional, Union

from portal.core.contracts import PortalStore
from portal.core.errors import ForbiddenError, NotFoundError
from portal.core.logging import get_logger
from portal.core.types import ResourceKind, ResourceStatus
from portal.services.assignment_ledger import AssignmentLedger
from portal.services.membership import MembershipGraph

__all__ = ["ResourceMetadata", "ResourceRegistry"]

log = get_logger(__name__)


@dataclass(frozen=True)
class ResourceMetadata:
    kind: ResourceKind
    title: str
    description: Optional[str] = None
    original_filename: Optional[str] = None
    content_type: Optional[str] = None
    size_bytes: Optional[int] = None
    storage_locator: Optional[str] = None
    body: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ResourceMetadata":
        fields = dict(data)
        fields["kind"] = ResourceKind(fields.get("kind", ResourceKind.FILE))
        return cls(**fields)

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("title must be a non-empty string")
        if self.size_bytes is not None and self.size_bytes < 0:
            raise ValueError("size_bytes must be >= 0")
        if self.kind is ResourceKind.FILE and not (self.storage_locator or "").strip():
            raise ValueError("file resources need a storage_locator")
        if self.kind is ResourceKind.NEWS and not (self.body or "").strip():
            raise ValueError("news resources need a body")


class ResourceRegistry:
    def __init__(
        self,
        store: PortalStore,
        ledger: Optional[AssignmentLedger] = None,
        membership: Optional[MembershipGraph] = None,
    ) -> None:
        self.store = store
        self.membership = membership or MembershipGraph(store)
        self.ledger = ledger or AssignmentLedger(store, self.membership)

    def register(self, creator_id: str, metadata: Union[ResourceMetadata, Mapping[str, Any]]):
        """
        Create a resource owned by `creator_id`.

        Raises:
            NotFoundError: if the creator does not exist.
            ValueError: if the metadata is malformed.
        """
        if not isinstance(metadata, ResourceMetadata):
            metadata = ResourceMetadata.from_mapping(metadata)
        metadata.validate()
        if self.store.principals.get_by_id(creator_id) is None:
            raise NotFoundError("Creator not found", details={"principal_id": creator_id})

        fields = asdict(metadata)
        kind = fields.pop("kind").value
        title = fields.pop("title")
        with self.store.transaction():
            resource = self.store.resources.create(kind=kind, title=title, created_by=creator_id, **fields)

        log.info("resource registered", extra={"resource_id": resource.id, "kind": kind, "created_by": creator_id})
        return resource

    def get(self, resource_id: str):
        resource = self.store.resources.get_by_id(resource_id)
        if resource is None:
            raise NotFoundError("Resource not found", details={"resource_id": resource_id})
        return resource

    def list_all(self, kind: Union[ResourceKind, str, None] = None) -> List:
        kind_value = ResourceKind(kind).value if kind is not None else None
        return list(self.store.resources.list_all(kind=kind_value))

    def archive(self, resource_id: str):
        resource = self.get(resource_id)
        with self.store.transaction():
            self.store.resources.update(resource, status=ResourceStatus.ARCHIVED.value)
        log.info("resource archived", extra={"resource_id": resource_id})
        return resource

    def remove(self, resource_id: str) -> None:
        resource = self.get(resource_id)
        with self.store.transaction():
            purged = self.ledger.purge_resources([resource.id])
            self.store.resources.delete(resource)
        log.info("resource removed", extra={"resource_id": resource_id, "assignments_purged": purged})

    def ensure_can_manage(self, resource: Any, actor_id: str) -> None:
        """Operators manage everything; anyone else only what they created."""
        actor = self.membership.standing(actor_id)
        if actor.is_operator or resource.created_by == actor.principal_id:
            return
        raise ForbiddenError("Not allowed to manage this resource", details={"resource_id": resource.id})
