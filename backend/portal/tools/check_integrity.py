"""
Report membership-graph inconsistencies that need manual repair.

Findings:
- unbound_principal: a member or tenant-lead with no tenant binding.
- lead_mismatch: tenant.lead_id and the lead principal's tier/tenant disagree.

Prints one JSON document; exits 0 when clean, 2 when findings exist, 3 on error.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from portal.core.config import get_settings
from portal.core.contracts import PortalStore
from portal.core.types import Tier


def collect_findings(store: PortalStore) -> List[Dict[str, Any]]:
    findings: List[Dict[str, Any]] = []

    for principal in store.principals.list_unbound():
        findings.append({"kind": "unbound_principal", "principal_id": principal.id, "tier": principal.tier})

    for tenant in store.tenants.list_all():
        if tenant.lead_id is None:
            continue
        lead = store.principals.get_by_id(tenant.lead_id)
        if lead is None or lead.tier != Tier.TENANT_LEAD.value or lead.tenant_id != tenant.id:
            findings.append({"kind": "lead_mismatch", "tenant_id": tenant.id, "lead_id": tenant.lead_id})

    for principal in store.principals.list_all():
        if principal.tier != Tier.TENANT_LEAD.value or principal.tenant_id is None:
            continue
        tenant = store.tenants.get_by_id(principal.tenant_id)
        if tenant is not None and tenant.lead_id != principal.id:
            findings.append({"kind": "lead_mismatch", "tenant_id": tenant.id, "lead_id": principal.id})

    return findings


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Check portal membership data for integrity violations")
    parser.add_argument(
        "--db-url",
        dest="db_url",
        type=str,
        default=None,
        help="Database URL (defaults to settings)",
    )
    args = parser.parse_args(argv)

    try:
        from portal.repos.store import SqlAlchemyStore

        engine = create_engine(args.db_url or get_settings().db_url)
        try:
            with Session(engine) as session:
                findings = collect_findings(SqlAlchemyStore(session))
        finally:
            engine.dispose()
    except SystemExit:
        raise
    except Exception as e:
        msg = str(e) if str(e) else e.__class__.__name__
        print(json.dumps({"ok": False, "error": msg}))
        return 3

    print(json.dumps({"ok": not findings, "findings": findings}))
    return 0 if not findings else 2


if __name__ == "__main__":
    sys.exit(main())
