import os
import sys

# Ensure the 'backend' directory is on sys.path so imports work from repo root
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)


def _as(pid: str) -> dict:
    return {"X-Principal-Id": pid}


def test_requires_identity_header(client):
    r = client.get("/api/resources")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "unauthorized"

    r = client.get("/api/resources", headers=_as("ghost"))
    assert r.status_code == 401


def test_register_grant_and_resolve(client, portal):
    r = client.post(
        "/api/resources",
        json={"kind": "file", "title": "Q3.pdf", "storage_locator": "acme/q3.pdf", "size_bytes": 10},
        headers=_as("op"),
    )
    assert r.status_code == 201, r.text
    resource = r.json()
    assert resource["created_by"] == "op"
    assert "storage_locator" not in resource

    g = client.post(
        "/api/assignments",
        json={"resource_id": resource["id"], "tenant_id": portal.acme.id},
        headers=_as("op"),
    )
    assert g.status_code == 201, g.text
    assert g.json()["grantee_tenant_id"] == portal.acme.id
    assert g.json()["grantee_principal_id"] is None

    alice = client.get("/api/resources", params={"kind": "file"}, headers=_as("alice")).json()
    gina = client.get("/api/resources", params={"kind": "file"}, headers=_as("gina")).json()
    assert [x["id"] for x in alice["items"]] == [resource["id"]]
    assert gina == {"items": [], "total": 0}


def test_grant_exclusivity_errors(client, portal):
    rid = portal.store.add_file("op").id

    both = client.post(
        "/api/assignments",
        json={"resource_id": rid, "principal_id": "alice", "tenant_id": portal.acme.id},
        headers=_as("op"),
    )
    neither = client.post("/api/assignments", json={"resource_id": rid}, headers=_as("op"))

    assert both.status_code == 422 and both.json()["error"]["code"] == "invalid_assignment"
    assert neither.status_code == 422 and neither.json()["error"]["code"] == "invalid_assignment"
    assert portal.store.assignments.rows == {}


def test_member_grant_forbidden(client, portal):
    rid = portal.store.add_file("alice").id
    r = client.post("/api/assignments", json={"resource_id": rid, "principal_id": "bob"}, headers=_as("alice"))
    assert r.status_code == 403


def test_visible_list_newest_first(client, portal):
    store = portal.store
    older = store.add_news("op", "Older")
    newer = store.add_news("op", "Newer")
    for res in (older, newer):
        client.post("/api/assignments", json={"resource_id": res.id, "principal_id": "bob"}, headers=_as("op"))

    items = client.get("/api/resources", headers=_as("bob")).json()["items"]
    assert [x["title"] for x in items] == ["Newer", "Older"]


def test_get_invisible_resource_is_404(client, portal):
    rid = portal.store.add_file("op").id
    assert client.get(f"/api/resources/{rid}", headers=_as("alice")).status_code == 404
    assert client.get(f"/api/resources/{rid}", headers=_as("op")).status_code == 200


def test_download_link(client, portal, object_store):
    rid = portal.store.add_file("op", "q.pdf", storage_locator="acme/q.pdf").id
    client.post("/api/assignments", json={"resource_id": rid, "principal_id": "alice"}, headers=_as("op"))

    r = client.get(f"/api/resources/{rid}/download", headers=_as("alice"))
    assert r.status_code == 200
    body = r.json()
    assert body["resource_id"] == rid
    assert body["url"].startswith("https://files.example.com/acme/q.pdf")
    assert body["expires_in"] == 3600

    assert client.get(f"/api/resources/{rid}/download", headers=_as("gina")).status_code == 404
    assert len(object_store.calls) == 1


def test_archive_and_remove_require_ownership(client, portal):
    rid = portal.store.add_file("alice").id
    client.post("/api/assignments", json={"resource_id": rid, "principal_id": "bob"}, headers=_as("op"))

    assert client.post(f"/api/resources/{rid}/archive", headers=_as("bob")).status_code == 403
    r = client.post(f"/api/resources/{rid}/archive", headers=_as("alice"))
    assert r.status_code == 200 and r.json()["status"] == "archived"
    assert client.get("/api/resources", headers=_as("bob")).json()["total"] == 0

    assert client.delete(f"/api/resources/{rid}", headers=_as("bob")).status_code == 403
    assert client.delete(f"/api/resources/{rid}", headers=_as("op")).status_code == 204
    assert portal.store.assignments.rows == {}
    assert client.delete(f"/api/resources/{rid}", headers=_as("op")).status_code == 404


def test_assignment_history_filtered_for_leads(client, portal):
    rid = portal.store.add_file("op").id
    for body in ({"principal_id": "alice"}, {"principal_id": "gina"}, {"principal_id": "acme-lead"}):
        client.post("/api/assignments", json={"resource_id": rid, **body}, headers=_as("op"))

    everything = client.get(f"/api/resources/{rid}/assignments", headers=_as("op")).json()
    mine = client.get(f"/api/resources/{rid}/assignments", headers=_as("acme-lead")).json()

    assert everything["total"] == 3
    assert {a["grantee_principal_id"] for a in mine["items"]} == {"alice", "acme-lead"}
    assert client.get(f"/api/resources/{rid}/assignments", headers=_as("bob")).status_code == 404


def test_revoke(client, portal):
    rid = portal.store.add_file("op").id
    aid = client.post(
        "/api/assignments", json={"resource_id": rid, "principal_id": "gina"}, headers=_as("op")
    ).json()["id"]

    assert client.delete(f"/api/assignments/{aid}", headers=_as("acme-lead")).status_code == 403
    assert client.delete(f"/api/assignments/{aid}", headers=_as("op")).status_code == 204
    assert client.delete(f"/api/assignments/{aid}", headers=_as("op")).status_code == 404


def test_bad_metadata_is_400(client):
    r = client.post("/api/resources", json={"kind": "news", "title": "No body"}, headers={"X-Principal-Id": "op"})
    assert r.status_code == 400
