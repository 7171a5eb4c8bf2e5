"""
Assignment API routes.

Endpoints:
- POST   /api/assignments                  -> grant a resource to a principal or a tenant
- DELETE /api/assignments/{assignment_id}  -> revoke a grant

Grantee exclusivity (exactly one of principal_id / tenant_id) is enforced by the
ledger and answers 422 invalid_assignment.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Path, Response, status

from portal.core.deps import get_current_principal, get_ledger
from portal.schemas.assignments import AssignmentOut, GrantRequest
from portal.services.assignment_ledger import AssignmentLedger

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


@router.post("", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED)
def grant(
    payload: GrantRequest,
    caller: Any = Depends(get_current_principal),
    ledger: AssignmentLedger = Depends(get_ledger),
) -> AssignmentOut:
    assignment = ledger.grant(
        payload.resource_id,
        {"principal_id": payload.principal_id, "tenant_id": payload.tenant_id},
        caller.id,
    )
    return AssignmentOut.model_validate(assignment)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke(
    assignment_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    ledger: AssignmentLedger = Depends(get_ledger),
) -> Response:
    ledger.revoke(assignment_id, caller.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
