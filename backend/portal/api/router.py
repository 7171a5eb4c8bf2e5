"""
Shared API router.

- Aggregates sub-routers from portal.api.routes.* modules.
- Uses no top-level prefix to avoid double-/api when sub-routers already define their own prefixes.

Sub-routers included:
- portal.api.routes.tenants      -> /api/tenants
- portal.api.routes.principals   -> /api/principals
- portal.api.routes.resources    -> /api/resources
- portal.api.routes.assignments  -> /api/assignments
- portal.api.routes.messages     -> /api/messages
"""

from __future__ import annotations

import importlib
from typing import List, Optional

from fastapi import APIRouter

__all__ = ["router", "INCLUDED_MODULES"]

# Each sub-router controls its own path under /api/...
router = APIRouter()


def _try_include_subrouter(parent: APIRouter, module_path: str) -> Optional[APIRouter]:
    """
    Import a module and include its 'router' (if present and is an APIRouter).
    Returns the included router or None when the module does not exist.
    """
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as e:
        # Only a missing route module is tolerated; broken imports inside it propagate
        if e.name != module_path:
            raise
        return None

    sub = getattr(module, "router", None)
    if isinstance(sub, APIRouter):
        parent.include_router(sub)
        return sub
    return None


def _include_known_subrouters(parent: APIRouter) -> List[str]:
    """
    Include the API sub-routers by conventional module names.
    Returns a list of module paths that were successfully included.
    """
    candidates = [
        "portal.api.routes.tenants",
        "portal.api.routes.principals",
        "portal.api.routes.resources",
        "portal.api.routes.assignments",
        "portal.api.routes.messages",
    ]
    included: List[str] = []
    for mod in candidates:
        if _try_include_subrouter(parent, mod) is not None:
            included.append(mod)
    return included


INCLUDED_MODULES = _include_known_subrouters(router)
