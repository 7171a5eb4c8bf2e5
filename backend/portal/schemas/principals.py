"""
Pydantic models for principal registration, membership changes and listings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from portal.core.types import Tier
from portal.schemas.base import ORMBase


class PrincipalRegister(BaseModel):
    principal_id: str = Field(..., min_length=1, max_length=64, description="Identity provider subject id")
    email: str = Field(..., min_length=3, max_length=320)
    display_name: Optional[str] = Field(default=None, max_length=255)
    tenant_id: Optional[str] = Field(default=None, description="Tenant to join, if known at sign-up")


class PrincipalRename(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=255)


class MembershipUpdate(BaseModel):
    tier: Tier
    tenant_id: Optional[str] = Field(default=None, description="Required for tenant-lead and member")


class PrincipalOut(ORMBase):
    id: str
    email: str
    display_name: str
    tier: str
    tenant_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PrincipalListResponse(BaseModel):
    items: list[PrincipalOut] = Field(default_factory=list)
    total: int = Field(..., ge=0)
