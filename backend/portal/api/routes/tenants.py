"""
Tenant API routes.

Endpoints:
- POST   /api/tenants                    -> create a tenant (operator)
- GET    /api/tenants                    -> list tenants visible to the caller
- GET    /api/tenants/{tenant_id}        -> fetch one tenant
- PATCH  /api/tenants/{tenant_id}        -> update contact details / status
- DELETE /api/tenants/{tenant_id}        -> delete a tenant and everything under it (operator)
- GET    /api/tenants/{tenant_id}/members -> list members (operator or the tenant's lead)
- POST   /api/tenants/{tenant_id}/members -> register or bind a member (operator or the tenant's lead)

Routes are thin: they delegate to TenantAdminService and return Pydantic schemas.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, status

from portal.core.deps import get_current_principal, get_tenant_admin
from portal.schemas.principals import PrincipalListResponse, PrincipalOut
from portal.schemas.tenants import (
    TenantCreate,
    TenantDeletionOut,
    TenantListResponse,
    TenantOut,
    TenantUpdate,
    TeamMemberAdd,
)
from portal.services.tenant_admin import TenantAdminService

router = APIRouter(prefix="/api/tenants", tags=["tenants"])


@router.post("", response_model=TenantOut, status_code=status.HTTP_201_CREATED)
def create_tenant(
    payload: TenantCreate,
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> TenantOut:
    try:
        tenant = admin.create_tenant(
            caller.id,
            name=payload.name,
            contact_email=payload.contact_email,
            contact_phone=payload.contact_phone,
            address=payload.address,
            status=payload.status,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return TenantOut.model_validate(tenant)


@router.get("", response_model=TenantListResponse)
def list_tenants(
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> TenantListResponse:
    items = [TenantOut.model_validate(t) for t in admin.list_tenants(caller.id)]
    return TenantListResponse(items=items, total=len(items))


@router.get("/{tenant_id}", response_model=TenantOut)
def get_tenant(
    tenant_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> TenantOut:
    return TenantOut.model_validate(admin.get_tenant(caller.id, tenant_id))


@router.patch("/{tenant_id}", response_model=TenantOut)
def update_tenant(
    payload: TenantUpdate,
    tenant_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> TenantOut:
    try:
        tenant = admin.update_tenant(caller.id, tenant_id, **payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return TenantOut.model_validate(tenant)


@router.delete("/{tenant_id}", response_model=TenantDeletionOut)
def delete_tenant(
    tenant_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> TenantDeletionOut:
    """
    Delete a tenant together with its principals, their resources, grants and messages.
    """
    summary = admin.delete_tenant(caller.id, tenant_id)
    return TenantDeletionOut(
        tenant_id=tenant_id,
        principals_removed=len(summary.principal_ids),
        resources_removed=summary.resources_removed,
        assignments_removed=summary.assignments_removed,
        messages_removed=summary.messages_removed,
    )


@router.get("/{tenant_id}/members", response_model=PrincipalListResponse)
def list_members(
    tenant_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> PrincipalListResponse:
    items = [PrincipalOut.model_validate(p) for p in admin.roster(caller.id, tenant_id)]
    return PrincipalListResponse(items=items, total=len(items))


@router.post("/{tenant_id}/members", response_model=PrincipalOut, status_code=status.HTTP_201_CREATED)
def add_member(
    payload: TeamMemberAdd,
    tenant_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> PrincipalOut:
    try:
        principal = admin.add_team_member(
            caller.id,
            tenant_id,
            payload.principal_id,
            payload.email,
            display_name=payload.display_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return PrincipalOut.model_validate(principal)
