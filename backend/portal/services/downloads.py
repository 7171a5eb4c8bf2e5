"""
Download links for file resources.

The portal never streams file bytes; it hands out short-lived signed URLs
from the object store, and only for files the caller can see.
"""

from __future__ import annotations

from typing import Optional

from portal.core.contracts import ObjectStore, PortalStore
from portal.core.errors import NotFoundError
from portal.core.logging import get_logger
from portal.core.types import ResourceKind
from portal.services.access_resolver import AccessResolver

__all__ = ["DownloadService"]

log = get_logger(__name__)


class DownloadService:
    def __init__(
        self,
        store: PortalStore,
        object_store: ObjectStore,
        resolver: Optional[AccessResolver] = None,
        ttl_seconds: int = 3600,
    ) -> None:
        self.store = store
        self.object_store = object_store
        self.resolver = resolver or AccessResolver(store)
        self.ttl_seconds = ttl_seconds

    def signed_url(self, principal_id: str, resource_id: str) -> str:
        """
        Return a time-limited URL for a visible file resource.

        Invisible and missing resources both raise NotFoundError, so callers
        cannot probe for resources they were never granted.
        """
        if not self.resolver.can_view(principal_id, resource_id):
            raise NotFoundError("Resource not found", details={"resource_id": resource_id})
        resource = self.store.resources.get_by_id(resource_id)
        if resource is None or resource.kind != ResourceKind.FILE.value or not resource.storage_locator:
            raise NotFoundError("No downloadable file for this resource", details={"resource_id": resource_id})

        url = self.object_store.signed_url(resource.storage_locator, self.ttl_seconds)
        log.info("download link issued", extra={"resource_id": resource_id, "principal_id": principal_id})
        return url
