"""条目接口的集成测试：认证、统一响应结构与错误映射。"""

from fastapi.testclient import TestClient


def _create(client: TestClient, headers: dict, name: str, *, parent_id=None, is_folder=True, **extra) -> dict:
    body = {"name": name, "is_folder": is_folder, "parent_id": parent_id, **extra}
    resp = client.post("/api/v1/entries", json=body, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def test_health(client: TestClient):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["data"] == {"status": "healthy"}
    assert resp.headers.get("x-request-id")


def test_requires_bearer_token(client: TestClient):
    resp = client.get("/api/v1/entries")
    assert resp.status_code == 401
    assert resp.json()["code"] == 401

    resp = client.get("/api/v1/entries", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_create_list_and_move_flow(client: TestClient, owner, auth_headers):
    headers = auth_headers(owner)

    docs = _create(client, headers, "Docs")
    pdf = _create(
        client,
        headers,
        "a.pdf",
        parent_id=docs["id"],
        is_folder=False,
        size_bytes=1024,
        mime_type="application/pdf",
        storage_url="https://cdn.example.com/a.pdf",
    )
    assert pdf["path"] == "/Docs/a.pdf"
    assert pdf["owner_id"] == owner

    listing = client.get("/api/v1/entries", params={"parentId": docs["id"]}, headers=headers)
    assert listing.status_code == 200
    assert [e["name"] for e in listing.json()["data"]] == ["a.pdf"]

    moved = client.post(f"/api/v1/entries/{pdf['id']}/move", json={"parent_id": None}, headers=headers)
    assert moved.status_code == 200
    assert moved.json()["data"]["path"] == "/a.pdf"

    crumbs = client.get(f"/api/v1/entries/{pdf['id']}/breadcrumbs", headers=headers)
    assert [c["name"] for c in crumbs.json()["data"]] == ["a.pdf"]


def test_move_into_descendant_returns_cycle_error(client: TestClient, owner, auth_headers):
    headers = auth_headers(owner)
    a = _create(client, headers, "A")
    b = _create(client, headers, "B", parent_id=a["id"])

    resp = client.post(f"/api/v1/entries/{a['id']}/move", json={"parent_id": b["id"]}, headers=headers)
    assert resp.status_code == 409
    payload = resp.json()
    assert payload["code"] == 409
    assert payload["data"]["kind"] == "cycle_detected"


def test_rename_cascades_to_children(client: TestClient, owner, auth_headers):
    headers = auth_headers(owner)
    a = _create(client, headers, "A")
    _create(client, headers, "child.txt", parent_id=a["id"], is_folder=False)

    resp = client.patch(f"/api/v1/entries/{a['id']}/name", json={"name": "Renamed"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["path"] == "/Renamed"

    listing = client.get("/api/v1/entries", params={"parentId": a["id"]}, headers=headers)
    assert [e["path"] for e in listing.json()["data"]] == ["/Renamed/child.txt"]


def test_other_owner_sees_not_found(client: TestClient, owner, other_owner, auth_headers):
    mine = _create(client, auth_headers(owner), "Shared")
    _create(client, auth_headers(other_owner), "Shared")
    intruder = auth_headers(other_owner)

    resp = client.get(f"/api/v1/entries/{mine['id']}", headers=intruder)
    assert resp.status_code == 404
    assert resp.json()["data"]["kind"] == "not_found"

    resp = client.patch(f"/api/v1/entries/{mine['id']}/name", json={"name": "Taken"}, headers=intruder)
    assert resp.status_code == 404


def test_delete_restore_star_and_trash(client: TestClient, owner, auth_headers):
    headers = auth_headers(owner)
    parent = _create(client, headers, "P")
    child = _create(client, headers, "C", parent_id=parent["id"])

    star = client.put(f"/api/v1/entries/{child['id']}/star", json={"starred": True}, headers=headers)
    assert star.status_code == 200
    starred = client.get("/api/v1/starred", headers=headers).json()["data"]
    assert [e["id"] for e in starred] == [child["id"]]

    assert client.delete(f"/api/v1/entries/{parent['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/v1/entries/{child['id']}", headers=headers).status_code == 404
    hidden = client.get(f"/api/v1/entries/{child['id']}", params={"includeDeleted": True}, headers=headers)
    assert hidden.status_code == 200
    assert hidden.json()["data"]["is_deleted"] is True

    trash = client.get("/api/v1/trash", headers=headers).json()["data"]
    assert [e["id"] for e in trash] == [parent["id"]]

    early = client.post(f"/api/v1/entries/{child['id']}/restore", headers=headers)
    assert early.status_code == 409
    assert early.json()["data"]["kind"] == "invalid_restore"

    assert client.post(f"/api/v1/entries/{parent['id']}/restore", headers=headers).status_code == 200
    assert client.post(f"/api/v1/entries/{child['id']}/restore", headers=headers).status_code == 200
    assert client.get(f"/api/v1/entries/{child['id']}", headers=headers).status_code == 200


def test_purge_requires_deleted_entry(client: TestClient, owner, auth_headers):
    headers = auth_headers(owner)
    folder = _create(client, headers, "Old")

    resp = client.delete(f"/api/v1/trash/{folder['id']}", headers=headers)
    assert resp.status_code == 409
    assert resp.json()["data"]["kind"] == "invalid_purge"

    client.delete(f"/api/v1/entries/{folder['id']}", headers=headers)
    resp = client.delete(f"/api/v1/trash/{folder['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"id": folder["id"], "purged": 1}


def test_validation_errors_use_envelope(client: TestClient, owner, auth_headers):
    headers = auth_headers(owner)
    resp = client.post("/api/v1/entries", json={"name": "", "is_folder": True}, headers=headers)
    assert resp.status_code == 422
    assert resp.json()["code"] == 422

    resp = client.post("/api/v1/entries", json={"name": "a/b", "is_folder": True}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["data"]["kind"] == "invalid_name"
