"""End-to-end tests for the HTTP surface (envelopes, guards, CRUD)."""
from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from roster.app import create_app
from roster.core.config import get_settings
from roster.repositories.memory_store import RecordStore

ADA = {"first_name": "Ada", "last_name": "Lovelace", "age": 30, "email": "ada@x.com"}


@pytest.fixture()
def store():
    return RecordStore()


@pytest.fixture()
def client(db_env, store):
    app = create_app(store=store)
    with TestClient(app) as c:
        yield c


def _token(client: TestClient, email: str, password: str = "s3cret-pass") -> dict:
    client.post("/auth/register", json={"email": email, "password": password})
    resp = client.post("/auth/login", data={"username": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture()
def member_headers(client):
    return _token(client, "bob@example.com")


@pytest.fixture()
def admin_headers(client):
    return _token(client, "admin@example.com")


def test_health_is_public(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_members_require_token(client):
    resp = client.get("/members")
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"
    body = resp.json()
    assert body == {"action": "READ", "message": "Not authenticated", "success": False, "data": None}


def test_invalid_token_is_rejected(client):
    resp = client.get("/members", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_empty_listing(client, member_headers):
    resp = client.get("/members", headers=member_headers)
    assert resp.status_code == 200
    assert resp.json() == {"action": "READ", "message": "0 of 0 members", "success": True, "data": []}


def test_crud_flow(client, member_headers, admin_headers):
    resp = client.post("/members", json=ADA, headers=member_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["action"] == "INSERT"
    assert body["success"] is True
    created = body["data"]
    member_id = created["id"]
    assert created["full_name"] == "Ada Lovelace"
    assert created["role"] == "member"

    resp = client.get(f"/members/{member_id}", headers=member_headers)
    assert resp.json()["data"] == created

    resp = client.patch(f"/members/{member_id}", json={"age": 31}, headers=member_headers)
    assert resp.status_code == 200
    assert resp.json()["action"] == "UPDATE"
    assert resp.json()["data"] == {**created, "age": 31}

    replacement = {"first_name": "Augusta", "last_name": "King", "age": 36, "email": "augusta@x.com"}
    resp = client.put(f"/members/{member_id}", json=replacement, headers=member_headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {
        **replacement,
        "id": member_id,
        "role": "member",
        "full_name": "Augusta King",
    }

    resp = client.delete(f"/members/{member_id}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {"action": "DELETE", "message": "Member deleted", "success": True, "data": True}

    resp = client.get(f"/members/{member_id}", headers=member_headers)
    assert resp.status_code == 404
    assert resp.json()["success"] is False
    assert resp.json()["data"] is None


def test_not_found_envelopes_keep_action(client, member_headers, admin_headers):
    assert client.get("/members/999", headers=member_headers).json()["action"] == "READ"
    assert client.patch("/members/999", json={"age": 3}, headers=member_headers).json()["action"] == "UPDATE"
    assert client.put("/members/999", json=ADA, headers=member_headers).status_code == 404
    resp = client.delete("/members/999", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["action"] == "DELETE"
    assert resp.json()["message"] == "Member 999 not found"


def test_delete_requires_admin(client, member_headers, store):
    store.insert(ADA)
    resp = client.delete("/members/1", headers=member_headers)
    assert resp.status_code == 403
    assert len(store) == 1


def test_validation_errors_use_envelope(client, member_headers, store):
    resp = client.post("/members", json={**ADA, "age": -1}, headers=member_headers)
    assert resp.status_code == 422
    body = resp.json()
    assert body["action"] == "INSERT"
    assert body["success"] is False
    assert body["errors"]
    assert len(store) == 0

    resp = client.post("/members", json={**ADA, "nickname": "ada"}, headers=member_headers)
    assert resp.status_code == 422

    resp = client.get("/members/abc", headers=member_headers)
    assert resp.status_code == 422


def test_empty_patch_is_rejected(client, member_headers, store):
    store.insert(ADA)
    resp = client.patch("/members/1", json={}, headers=member_headers)
    assert resp.status_code == 422
    assert resp.json()["message"] == "No fields to update"


def test_duplicate_email_conflicts(client, member_headers):
    client.post("/members", json=ADA, headers=member_headers)
    resp = client.post("/members", json={**ADA, "email": "ADA@x.com"}, headers=member_headers)
    assert resp.status_code == 409
    assert resp.json()["success"] is False


def test_listing_pagination_and_search(client, member_headers, store):
    for i in range(5):
        store.insert({**ADA, "first_name": f"Name{i}", "email": f"n{i}@x.com"})
    resp = client.get("/members", params={"offset": 1, "limit": 2}, headers=member_headers)
    body = resp.json()
    assert [m["first_name"] for m in body["data"]] == ["Name1", "Name2"]
    assert body["message"] == "2 of 5 members"

    resp = client.get("/members", params={"q": "name4"}, headers=member_headers)
    assert [m["id"] for m in resp.json()["data"]] == [5]

    resp = client.get("/members", params={"limit": 0}, headers=member_headers)
    assert resp.status_code == 422


def test_register_login_and_me(client):
    resp = client.post("/auth/register", json={"email": "Carol@Example.com", "password": "s3cret-pass"})
    assert resp.status_code == 201
    assert resp.json()["data"] == {"email": "carol@example.com", "role": "member"}

    resp = client.post("/auth/register", json={"email": "carol@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 409

    resp = client.post("/auth/login", data={"username": "carol@example.com", "password": "bad-pass"})
    assert resp.status_code == 401

    resp = client.post("/auth/login", data={"username": "carol@example.com", "password": "s3cret-pass"})
    token = resp.json()
    assert token["token_type"] == "bearer"
    assert token["expires_in"] == get_settings().access_token_ttl_seconds

    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert resp.json()["data"]["email"] == "carol@example.com"


def test_change_password(client, member_headers):
    resp = client.post(
        "/auth/password",
        json={"current_password": "wrong-pass", "new_password": "brand-new-pass"},
        headers=member_headers,
    )
    assert resp.status_code == 403
    resp = client.post(
        "/auth/password",
        json={"current_password": "s3cret-pass", "new_password": "brand-new-pass"},
        headers=member_headers,
    )
    assert resp.status_code == 200
    resp = client.post("/auth/login", data={"username": "bob@example.com", "password": "brand-new-pass"})
    assert resp.status_code == 200


def test_login_is_rate_limited(client):
    statuses = [
        client.post("/auth/login", data={"username": "x@example.com", "password": "nope"}).status_code
        for _ in range(21)
    ]
    assert statuses[:20] == [401] * 20
    assert statuses[20] == 429


def test_seed_file_is_loaded(db_env, tmp_path, monkeypatch):
    seed = tmp_path / "members.json"
    seed.write_text(json.dumps([{**ADA, "id": 10}, {**ADA, "email": "ada2@x.com"}]), encoding="utf-8")
    monkeypatch.setenv("SEED_FILE", str(seed))
    get_settings.cache_clear()

    app = create_app()
    with TestClient(app) as c:
        assert c.get("/health").json()["members"] == 2
        headers = _token(c, "bob@example.com")
        ids = [m["id"] for m in c.get("/members", headers=headers).json()["data"]]
    assert ids == [10, 11]


def _write_seed(tmp_path, monkeypatch, records) -> None:
    seed = tmp_path / "members.json"
    seed.write_text(json.dumps(records), encoding="utf-8")
    monkeypatch.setenv("SEED_FILE", str(seed))
    get_settings.cache_clear()


@pytest.mark.parametrize("bad_id", ["1", "abc", 3.0])
def test_seed_file_with_non_integer_id_fails_startup(db_env, tmp_path, monkeypatch, bad_id):
    _write_seed(tmp_path, monkeypatch, [{**ADA, "id": bad_id}])
    with pytest.raises(ValueError, match="must be an integer"):
        create_app()


def test_seed_file_with_repeated_email_fails_startup(db_env, tmp_path, monkeypatch):
    _write_seed(tmp_path, monkeypatch, [ADA, {**ADA, "first_name": "Augusta", "email": "ADA@x.com"}])
    with pytest.raises(ValueError, match="more than once"):
        create_app()


def test_seeded_ids_never_collide_with_new_members(db_env, tmp_path, monkeypatch):
    _write_seed(tmp_path, monkeypatch, [{**ADA, "id": 1}])
    with TestClient(create_app()) as c:
        headers = _token(c, "bob@example.com")
        created = c.post("/members", json={**ADA, "email": "z@x.com"}, headers=headers).json()["data"]
        ids = [m["id"] for m in c.get("/members", headers=headers).json()["data"]]
        assert c.get("/members/1", headers=headers).json()["data"]["email"] == "ada@x.com"
    assert created["id"] == 2
    assert ids == [1, 2]
