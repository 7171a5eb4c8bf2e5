"""
Pydantic models for creating, updating and listing tenants.

Designed to be compatible with the SQLAlchemy model portal.models.tenant.Tenant.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from portal.core.types import TenantStatus
from portal.schemas.base import ORMBase


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_email: str = Field(..., min_length=3, max_length=320)
    contact_phone: Optional[str] = Field(default=None, max_length=64)
    address: Optional[str] = Field(default=None)
    status: TenantStatus = Field(default=TenantStatus.ACTIVE)


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    contact_email: Optional[str] = Field(default=None, min_length=3, max_length=320)
    contact_phone: Optional[str] = Field(default=None, max_length=64)
    address: Optional[str] = Field(default=None)
    status: Optional[TenantStatus] = Field(default=None)


class TeamMemberAdd(BaseModel):
    principal_id: str = Field(..., min_length=1, max_length=64, description="Identity provider subject id")
    email: str = Field(..., min_length=3, max_length=320)
    display_name: Optional[str] = Field(default=None, max_length=255)


class TenantOut(ORMBase):
    id: str
    name: str
    contact_email: str
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    lead_id: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime


class TenantListResponse(BaseModel):
    items: list[TenantOut] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class TenantDeletionOut(BaseModel):
    tenant_id: str
    principals_removed: int = Field(..., ge=0)
    resources_removed: int = Field(..., ge=0)
    assignments_removed: int = Field(..., ge=0)
    messages_removed: int = Field(..., ge=0)
