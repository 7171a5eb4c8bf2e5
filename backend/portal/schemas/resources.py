"""
Pydantic models for registering and listing resources (files and news items).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from portal.core.types import ResourceKind
from portal.schemas.base import ORMBase


class ResourceCreate(BaseModel):
    kind: ResourceKind = Field(default=ResourceKind.FILE)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None)
    original_filename: Optional[str] = Field(default=None, max_length=255)
    content_type: Optional[str] = Field(default=None, max_length=255)
    size_bytes: Optional[int] = Field(default=None, ge=0)
    storage_locator: Optional[str] = Field(default=None, max_length=1024, description="Object store path (files)")
    body: Optional[str] = Field(default=None, description="Article text (news)")


class ResourceOut(ORMBase):
    id: str
    kind: str
    title: str
    description: Optional[str] = None
    original_filename: Optional[str] = None
    content_type: Optional[str] = None
    size_bytes: Optional[int] = None
    body: Optional[str] = None
    status: str
    created_by: str
    created_at: datetime


class ResourceListResponse(BaseModel):
    items: list[ResourceOut] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class DownloadOut(BaseModel):
    resource_id: str
    url: str
    expires_in: int = Field(..., ge=1)
