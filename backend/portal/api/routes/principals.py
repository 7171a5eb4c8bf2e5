"""
Principal API routes.

Endpoints:
- POST   /api/principals/register              -> record a newly signed-up identity
- GET    /api/principals                       -> list principals visible to the caller
- GET    /api/principals/me                    -> the calling principal
- PATCH  /api/principals/{principal_id}        -> change display name (self, operator or own lead)
- PUT    /api/principals/{principal_id}/membership -> set tier and tenant (operator)
- DELETE /api/principals/{principal_id}        -> remove an account and what it owns (operator or own lead)

Registration is called by the identity provider's sign-up hook and is the only
route that does not require the identity header.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status

from portal.core.deps import get_current_principal, get_tenant_admin
from portal.schemas.principals import (
    MembershipUpdate,
    PrincipalListResponse,
    PrincipalOut,
    PrincipalRegister,
    PrincipalRename,
)
from portal.services.tenant_admin import TenantAdminService

router = APIRouter(prefix="/api/principals", tags=["principals"])


@router.post("/register", response_model=PrincipalOut, status_code=status.HTTP_201_CREATED)
def register_principal(
    payload: PrincipalRegister,
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> PrincipalOut:
    try:
        principal = admin.register_principal(
            payload.principal_id,
            payload.email,
            display_name=payload.display_name,
            tenant_id=payload.tenant_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return PrincipalOut.model_validate(principal)


@router.get("", response_model=PrincipalListResponse)
def list_principals(
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> PrincipalListResponse:
    items = [PrincipalOut.model_validate(p) for p in admin.list_principals(caller.id)]
    return PrincipalListResponse(items=items, total=len(items))


@router.get("/me", response_model=PrincipalOut)
def who_am_i(caller: Any = Depends(get_current_principal)) -> PrincipalOut:
    return PrincipalOut.model_validate(caller)


@router.get("/{principal_id}", response_model=PrincipalOut)
def get_principal(
    principal_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> PrincipalOut:
    return PrincipalOut.model_validate(admin.get_principal(caller.id, principal_id))


@router.patch("/{principal_id}", response_model=PrincipalOut)
def rename_principal(
    payload: PrincipalRename,
    principal_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> PrincipalOut:
    try:
        principal = admin.rename(caller.id, principal_id, payload.display_name)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return PrincipalOut.model_validate(principal)


@router.put("/{principal_id}/membership", response_model=PrincipalOut)
def set_membership(
    payload: MembershipUpdate,
    principal_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> PrincipalOut:
    """
    Set a principal's tier and tenant. Making someone a tenant-lead fails with
    409 when the tenant already has a different lead.
    """
    try:
        principal = admin.set_membership(caller.id, principal_id, payload.tier, payload.tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return PrincipalOut.model_validate(principal)


@router.delete("/{principal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_principal(
    principal_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    admin: TenantAdminService = Depends(get_tenant_admin),
) -> Response:
    admin.delete_principal(caller.id, principal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
