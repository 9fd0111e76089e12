"""HTTP tests for the files and folders routes."""

import inspect
import uuid

from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from main import app
from models.file import MAX_FILE_SIZE
from tests.conftest import make_token


def _create_folder(client, headers, name, parent_id=None):
    resp = client.post("/folders/", json={"name": name, "parent_id": parent_id}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_file(client, headers, name="B.png", parent_id=None, size=2048):
    resp = client.post(
        "/files/",
        json={
            "name": name,
            "type": "image/png",
            "size": size,
            "file_url": f"https://files.example.com/{name}",
            "thumbnail_url": f"https://files.example.com/thumbs/{name}",
            "parent_id": parent_id,
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_root_and_health(client: TestClient):
    assert client.get("/").status_code == 200
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"


def test_requests_without_token_are_rejected(client: TestClient):
    assert client.get("/files/").status_code == 401
    bad = client.get("/files/", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401


def test_folder_and_file_flow(client: TestClient, auth_headers):
    folder = _create_folder(client, auth_headers, "A")
    assert folder["is_folder"] is True
    assert folder["size"] == 0
    assert folder["type"] == "folder"

    file_b = _create_file(client, auth_headers, parent_id=folder["id"])
    assert file_b["path"] == "/A/B.png"

    listed = client.get("/files/", params={"parent_id": folder["id"], "filter": "all"}, headers=auth_headers)
    assert listed.status_code == 200
    assert [n["id"] for n in listed.json()] == [file_b["id"]]

    fetched = client.get(f"/files/{file_b['id']}", headers=auth_headers)
    assert fetched.status_code == 200
    assert fetched.json()["size"] == 2048

    crumbs = client.get(f"/files/{file_b['id']}/breadcrumbs", headers=auth_headers)
    assert [c["name"] for c in crumbs.json()] == ["A"]

    trashed = client.patch(f"/files/{folder['id']}", json={"is_trash": True}, headers=auth_headers)
    assert trashed.status_code == 200
    root = client.get("/files/", params={"filter": "active"}, headers=auth_headers)
    assert folder["id"] not in [n["id"] for n in root.json()]


def test_other_user_gets_not_found(client: TestClient, auth_headers, other_user_id):
    node = _create_file(client, auth_headers)
    other = {"Authorization": f"Bearer {make_token(other_user_id)}"}
    assert client.get(f"/files/{node['id']}", headers=other).status_code == 404
    assert client.delete(f"/files/{node['id']}", headers=other).status_code == 404


def test_negative_size_fails_request_validation(client: TestClient, auth_headers):
    resp = client.post(
        "/files/",
        json={"name": "x", "type": "text/plain", "size": -5, "file_url": "https://files.example.com/x"},
        headers=auth_headers,
    )
    assert resp.status_code == 422


def test_move_into_self_returns_conflict(client: TestClient, auth_headers):
    node = _create_file(client, auth_headers)
    resp = client.patch(f"/files/{node['id']}", json={"parent_id": node["id"]}, headers=auth_headers)
    assert resp.status_code == 409


def test_move_to_root_with_explicit_null(client: TestClient, auth_headers):
    folder = _create_folder(client, auth_headers, "docs")
    node = _create_file(client, auth_headers, "n.png", parent_id=folder["id"])

    resp = client.patch(f"/files/{node['id']}", json={"parent_id": None}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["parent_id"] is None
    assert resp.json()["path"] == "/n.png"


def test_rename_only_leaves_parent_alone(client: TestClient, auth_headers):
    folder = _create_folder(client, auth_headers, "docs")
    node = _create_file(client, auth_headers, "n.png", parent_id=folder["id"])

    resp = client.patch(f"/files/{node['id']}", json={"name": "m.png"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["parent_id"] == folder["id"]
    assert resp.json()["path"] == "/docs/m.png"


def test_star_trash_and_empty_trash(client: TestClient, auth_headers):
    node = _create_file(client, auth_headers, "s.png")

    starred = client.patch(f"/files/{node['id']}/star", headers=auth_headers)
    assert starred.json()["is_starred"] is True
    assert [n["id"] for n in client.get("/files/starred", headers=auth_headers).json()] == [node["id"]]

    trashed = client.patch(f"/files/{node['id']}/trash", headers=auth_headers)
    assert trashed.json()["is_trash"] is True
    assert [n["id"] for n in client.get("/files/trash", headers=auth_headers).json()] == [node["id"]]
    assert client.get("/files/starred", headers=auth_headers).json() == []

    emptied = client.delete("/files/trash", headers=auth_headers)
    assert emptied.status_code == 200
    assert emptied.json() == {"deleted": 1}
    assert client.get(f"/files/{node['id']}", headers=auth_headers).status_code == 404


def test_delete_modes(client: TestClient, auth_headers):
    folder = _create_folder(client, auth_headers, "full")
    _create_file(client, auth_headers, "inside.png", parent_id=folder["id"])

    soft = client.delete(f"/files/{folder['id']}", headers=auth_headers)
    assert soft.status_code == 204
    assert client.get(f"/files/{folder['id']}", headers=auth_headers).json()["is_trash"] is True

    rejected = client.delete(f"/files/{folder['id']}", params={"mode": "hard"}, headers=auth_headers)
    assert rejected.status_code == 400

    hard = client.delete(
        f"/files/{folder['id']}", params={"mode": "hard", "recursive": "true"}, headers=auth_headers
    )
    assert hard.status_code == 204
    assert client.get(f"/files/{folder['id']}", headers=auth_headers).status_code == 404


def test_folder_tree(client: TestClient, auth_headers):
    photos = _create_folder(client, auth_headers, "photos")
    trips = _create_folder(client, auth_headers, "trips", parent_id=photos["id"])
    _create_file(client, auth_headers, "p.png", parent_id=photos["id"])

    tree = client.get("/folders/tree", headers=auth_headers)
    assert tree.status_code == 200
    body = tree.json()
    assert [n["name"] for n in body] == ["photos"]
    assert body[0]["files_count"] == 1
    assert body[0]["children"][0]["id"] == trips["id"]


def test_unknown_parent_listing_is_not_found(client: TestClient, auth_headers):
    resp = client.get("/files/", params={"parent_id": str(uuid.uuid4())}, headers=auth_headers)
    assert resp.status_code == 404


def test_move_into_other_users_folder_is_forbidden(client: TestClient, auth_headers, other_user_id):
    other = {"Authorization": f"Bearer {make_token(other_user_id)}"}
    theirs = _create_folder(client, other, "theirs")
    mine = _create_file(client, auth_headers)

    resp = client.patch(f"/files/{mine['id']}", json={"parent_id": theirs["id"]}, headers=auth_headers)
    assert resp.status_code == 403
    assert client.get(f"/files/{mine['id']}", headers=auth_headers).json()["parent_id"] is None


def test_move_under_own_descendant_returns_conflict(client: TestClient, auth_headers):
    a = _create_folder(client, auth_headers, "A")
    b = _create_folder(client, auth_headers, "B", parent_id=a["id"])
    c = _create_folder(client, auth_headers, "C", parent_id=b["id"])

    resp = client.patch(f"/files/{a['id']}", json={"parent_id": c["id"]}, headers=auth_headers)
    assert resp.status_code == 409
    assert client.get(f"/files/{a['id']}", headers=auth_headers).json()["parent_id"] is None


def test_large_sizes_up_to_bigint_are_accepted(client: TestClient, auth_headers):
    node = _create_file(client, auth_headers, "disk.img", size=3_000_000_000)
    assert node["size"] == 3_000_000_000

    resp = client.post(
        "/files/",
        json={"name": "x", "type": "text/plain", "size": MAX_FILE_SIZE + 1, "file_url": "https://files.example.com/x"},
        headers=auth_headers,
    )
    assert resp.status_code == 422


def test_tree_route_handlers_are_sync():
    routes = [
        route for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith(("/files", "/folders"))
    ]
    assert routes
    for route in routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path
