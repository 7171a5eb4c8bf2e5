"""
Dependency wiring for the store, domain services and the calling principal.

This module exposes factory functions that construct concrete implementations
behind Protocol-like interfaces. It must not contain business logic.

Provided factories:
- get_store (SqlAlchemyStore bound to the request session)
- get_membership / get_resolver / get_ledger / get_registry
- get_authorizer / get_message_service
- get_tenant_admin / get_identity_service
- get_object_store / get_download_service
- get_current_principal (reads the identity header)
"""
from __future__ import annotations

from typing import Any

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from portal.core.config import Settings, get_settings
from portal.core.contracts import ObjectStore, PortalStore
from portal.core.signing import HmacUrlSigner
from portal.db.session import get_db
from portal.services.access_resolver import AccessResolver
from portal.services.assignment_ledger import AssignmentLedger
from portal.services.downloads import DownloadService
from portal.services.identity import IdentityService
from portal.services.membership import MembershipGraph
from portal.services.messaging import MessageService, MessagingAuthorizer
from portal.services.resource_registry import ResourceRegistry
from portal.services.tenant_admin import TenantAdminService

__all__ = [
    # store
    "get_store",
    # domain services
    "get_membership",
    "get_resolver",
    "get_ledger",
    "get_registry",
    "get_authorizer",
    "get_message_service",
    "get_tenant_admin",
    "get_identity_service",
    # downloads
    "get_object_store",
    "get_download_service",
    # caller
    "get_current_principal",
]

# -------------------------------
# Store
# -------------------------------

def get_store(db: Session = Depends(get_db)) -> PortalStore:
    """Provide a PortalStore bound to the current DB session."""
    from portal.repos.store import SqlAlchemyStore
    return SqlAlchemyStore(db)

# -------------------------------
# Domain services
# -------------------------------

def get_membership(store: PortalStore = Depends(get_store)) -> MembershipGraph:
    return MembershipGraph(store)


def get_resolver(
    store: PortalStore = Depends(get_store),
    membership: MembershipGraph = Depends(get_membership),
) -> AccessResolver:
    return AccessResolver(store, membership)


def get_ledger(
    store: PortalStore = Depends(get_store),
    membership: MembershipGraph = Depends(get_membership),
    resolver: AccessResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> AssignmentLedger:
    return AssignmentLedger(
        store,
        membership,
        resolver,
        tenant_leads_may_grant=settings.tenant_leads_may_grant,
    )


def get_registry(
    store: PortalStore = Depends(get_store),
    ledger: AssignmentLedger = Depends(get_ledger),
    membership: MembershipGraph = Depends(get_membership),
) -> ResourceRegistry:
    return ResourceRegistry(store, ledger, membership)


def get_authorizer(membership: MembershipGraph = Depends(get_membership)) -> MessagingAuthorizer:
    return MessagingAuthorizer(membership)


def get_message_service(
    store: PortalStore = Depends(get_store),
    membership: MembershipGraph = Depends(get_membership),
    authorizer: MessagingAuthorizer = Depends(get_authorizer),
) -> MessageService:
    return MessageService(store, membership, authorizer)


def get_tenant_admin(
    store: PortalStore = Depends(get_store),
    membership: MembershipGraph = Depends(get_membership),
) -> TenantAdminService:
    return TenantAdminService(store, membership)


def get_identity_service(store: PortalStore = Depends(get_store)) -> IdentityService:
    return IdentityService(store.principals)

# -------------------------------
# Downloads
# -------------------------------

def get_object_store(settings: Settings = Depends(get_settings)) -> ObjectStore:
    """Return the URL signer for the configured object store."""
    return HmacUrlSigner(settings.storage_base_url, settings.storage_signing_secret)


def get_download_service(
    store: PortalStore = Depends(get_store),
    object_store: ObjectStore = Depends(get_object_store),
    resolver: AccessResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> DownloadService:
    return DownloadService(store, object_store, resolver, ttl_seconds=settings.signed_url_ttl_seconds)

# -------------------------------
# Caller identity
# -------------------------------

def get_current_principal(
    request: Request,
    identity: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
) -> Any:
    """
    Resolve the calling principal from the identity provider's header.

    Raises AuthError (401) when the header is missing or names no principal.
    """
    return identity.authenticate(request.headers.get(settings.principal_header))
