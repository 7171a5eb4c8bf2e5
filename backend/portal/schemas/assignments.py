"""
Pydantic models for granting and listing resource assignments.

A grant names exactly one grantee: principal_id or tenant_id. The exclusivity
check itself happens in the ledger so API and service callers share one rule.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from portal.schemas.base import ORMBase


class GrantRequest(BaseModel):
    resource_id: str = Field(..., min_length=1)
    principal_id: Optional[str] = Field(default=None, description="Grant to one principal")
    tenant_id: Optional[str] = Field(default=None, description="Grant to a whole tenant")


class AssignmentOut(ORMBase):
    id: str
    resource_id: str
    grantee_principal_id: Optional[str] = None
    grantee_tenant_id: Optional[str] = None
    granted_by: str
    created_at: datetime


class AssignmentListResponse(BaseModel):
    items: list[AssignmentOut] = Field(default_factory=list)
    total: int = Field(..., ge=0)
