"""
Resource API routes (files and news items).

Endpoints:
- POST   /api/resources                          -> register a resource owned by the caller
- GET    /api/resources?kind=file|news           -> resources visible to the caller, newest first
- GET    /api/resources/{resource_id}            -> one visible resource
- POST   /api/resources/{resource_id}/archive    -> soft-delete (operator or creator)
- DELETE /api/resources/{resource_id}            -> remove with all grants (operator or creator)
- GET    /api/resources/{resource_id}/download   -> signed download URL for a visible file
- GET    /api/resources/{resource_id}/assignments -> grants of a visible resource

A resource the caller cannot see answers 404, never 403.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from portal.core.deps import (
    get_current_principal,
    get_download_service,
    get_ledger,
    get_registry,
    get_resolver,
)
from portal.core.errors import NotFoundError
from portal.core.types import ResourceKind
from portal.schemas.assignments import AssignmentListResponse, AssignmentOut
from portal.schemas.resources import DownloadOut, ResourceCreate, ResourceListResponse, ResourceOut
from portal.services.access_resolver import AccessResolver
from portal.services.assignment_ledger import AssignmentLedger
from portal.services.downloads import DownloadService
from portal.services.resource_registry import ResourceMetadata, ResourceRegistry

router = APIRouter(prefix="/api/resources", tags=["resources"])


def _visible_resource(resource_id: str, caller: Any, resolver: AccessResolver, registry: ResourceRegistry) -> Any:
    if not resolver.can_view(caller.id, resource_id):
        raise NotFoundError("Resource not found", details={"resource_id": resource_id})
    return registry.get(resource_id)


@router.post("", response_model=ResourceOut, status_code=status.HTTP_201_CREATED)
def register_resource(
    payload: ResourceCreate,
    caller: Any = Depends(get_current_principal),
    registry: ResourceRegistry = Depends(get_registry),
) -> ResourceOut:
    try:
        resource = registry.register(caller.id, ResourceMetadata(**payload.model_dump()))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return ResourceOut.model_validate(resource)


@router.get("", response_model=ResourceListResponse)
def list_visible_resources(
    kind: Optional[ResourceKind] = Query(None, description="Restrict to files or news items"),
    caller: Any = Depends(get_current_principal),
    resolver: AccessResolver = Depends(get_resolver),
) -> ResourceListResponse:
    """
    Resolve the caller's visible set and order it newest first.
    """
    resources = sorted(resolver.resolve_visible(caller.id, kind), key=lambda r: r.created_at, reverse=True)
    items = [ResourceOut.model_validate(r) for r in resources]
    return ResourceListResponse(items=items, total=len(items))


@router.get("/{resource_id}", response_model=ResourceOut)
def get_resource(
    resource_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    resolver: AccessResolver = Depends(get_resolver),
    registry: ResourceRegistry = Depends(get_registry),
) -> ResourceOut:
    return ResourceOut.model_validate(_visible_resource(resource_id, caller, resolver, registry))


@router.post("/{resource_id}/archive", response_model=ResourceOut)
def archive_resource(
    resource_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    registry: ResourceRegistry = Depends(get_registry),
) -> ResourceOut:
    registry.ensure_can_manage(registry.get(resource_id), caller.id)
    return ResourceOut.model_validate(registry.archive(resource_id))


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_resource(
    resource_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    registry: ResourceRegistry = Depends(get_registry),
) -> Response:
    registry.ensure_can_manage(registry.get(resource_id), caller.id)
    registry.remove(resource_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{resource_id}/download", response_model=DownloadOut)
def download_resource(
    resource_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    downloads: DownloadService = Depends(get_download_service),
) -> DownloadOut:
    url = downloads.signed_url(caller.id, resource_id)
    return DownloadOut(resource_id=resource_id, url=url, expires_in=downloads.ttl_seconds)


@router.get("/{resource_id}/assignments", response_model=AssignmentListResponse)
def list_resource_assignments(
    resource_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    resolver: AccessResolver = Depends(get_resolver),
    registry: ResourceRegistry = Depends(get_registry),
    ledger: AssignmentLedger = Depends(get_ledger),
) -> AssignmentListResponse:
    _visible_resource(resource_id, caller, resolver, registry)
    items = [AssignmentOut.model_validate(a) for a in ledger.list_for_resource(resource_id, viewer_id=caller.id)]
    return AssignmentListResponse(items=items, total=len(items))
