"""
Pydantic models for direct messages, tenant broadcasts and announcements.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from portal.schemas.base import ORMBase


class MessageCreate(BaseModel):
    recipient_id: str = Field(..., min_length=1)
    subject: Optional[str] = Field(default=None, max_length=255)
    body: str = Field(..., min_length=1)


class BroadcastCreate(BaseModel):
    subject: Optional[str] = Field(default=None, max_length=255)
    body: str = Field(..., min_length=1)


class AnnouncementCreate(BaseModel):
    subject: Optional[str] = Field(default=None, max_length=255)
    body: str = Field(..., min_length=1)
    # None addresses every tenant
    tenant_id: Optional[str] = Field(default=None, min_length=1)


class MessageOut(ORMBase):
    id: str
    sender_id: str
    recipient_id: str
    subject: Optional[str] = None
    body: str
    kind: str
    read_at: Optional[datetime] = None
    created_at: datetime


class MessageListResponse(BaseModel):
    items: list[MessageOut] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class CanMessageOut(BaseModel):
    sender_id: str
    recipient_id: str
    allowed: bool
