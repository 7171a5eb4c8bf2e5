"""Shared Pydantic base for schemas read straight off ORM/domain objects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)
