"""
Domain value types shared by models, repositories and services.

- Tier: principal capacity (operator / tenant-lead / member).
- ResourceKind, ResourceStatus, TenantStatus, MessageKind: string enums stored as text.
- Grantee: tagged union naming exactly one recipient of a grant, either one
  principal or one whole tenant. parse_grantee() is the only way raw
  "principal_id / tenant_id" pairs enter the domain.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from portal.core.errors import InvalidAssignmentError

__all__ = [
    "Tier",
    "ResourceKind",
    "ResourceStatus",
    "TenantStatus",
    "MessageKind",
    "PrincipalGrantee",
    "TenantGrantee",
    "Grantee",
    "parse_grantee",
    "coerce_grantee",
]


class Tier(str, Enum):
    OPERATOR = "operator"
    TENANT_LEAD = "tenant-lead"
    MEMBER = "member"

    @property
    def requires_tenant(self) -> bool:
        return self is not Tier.OPERATOR


class ResourceKind(str, Enum):
    FILE = "file"
    NEWS = "news"


class ResourceStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class TenantStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class MessageKind(str, Enum):
    DIRECT = "direct"
    BROADCAST = "broadcast"
    ANNOUNCEMENT = "announcement"


@dataclass(frozen=True)
class PrincipalGrantee:
    principal_id: str


@dataclass(frozen=True)
class TenantGrantee:
    tenant_id: str


Grantee = Union[PrincipalGrantee, TenantGrantee]


def _blank(value: Optional[str]) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_grantee(principal_id: Optional[str] = None, tenant_id: Optional[str] = None) -> Grantee:
    """
    Build a Grantee from two optional identifiers.

    Raises:
        InvalidAssignmentError: if both or neither identifier is supplied.
    """
    has_principal = not _blank(principal_id)
    has_tenant = not _blank(tenant_id)
    if has_principal and has_tenant:
        raise InvalidAssignmentError(
            "A grant names either one principal or one tenant, not both",
            details={"principal_id": principal_id, "tenant_id": tenant_id},
        )
    if not has_principal and not has_tenant:
        raise InvalidAssignmentError("A grant must name a principal or a tenant")
    if has_principal:
        return PrincipalGrantee(principal_id=str(principal_id).strip())
    return TenantGrantee(tenant_id=str(tenant_id).strip())


def coerce_grantee(value: Union[Grantee, Mapping[str, Any], None]) -> Grantee:
    """Accept a Grantee as-is or parse a {"principal_id", "tenant_id"} mapping."""
    if isinstance(value, (PrincipalGrantee, TenantGrantee)):
        return value
    if value is None:
        raise InvalidAssignmentError("A grant must name a principal or a tenant")
    if not isinstance(value, Mapping):
        raise InvalidAssignmentError("Unsupported grantee value")
    return parse_grantee(value.get("principal_id"), value.get("tenant_id"))
