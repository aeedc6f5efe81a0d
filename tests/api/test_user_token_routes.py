"""User and token routes — registration, login, ownership and session lifecycle.

Tests cover:
    - Envelopes: {"success": true, "data": ...} / {"success": false, "error": ...}
    - Body validation failures are 400 with field details
    - Missing or foreign session tokens yield 401 / 403
"""

from tests.fakes import START_MS

USER = {
    "firstName": "Eve", "lastName": "Example", "email": "eve@example.com",
    "password": "pw", "address": "Nowhere 1",
}


async def test_register_returns_public_user(client):
    res = await client.post("/api/v1/users", json=USER)
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "eve@example.com"
    assert "password" not in body["data"]["user"]


async def test_register_duplicate_is_400(client):
    await client.post("/api/v1/users", json=USER)
    res = await client.post("/api/v1/users", json=USER)
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "A User with that id already exists"


async def test_register_email_with_apostrophe(client):
    res = await client.post("/api/v1/users", json={**USER, "email": "pat.o'neil@example.com"})
    assert res.status_code == 200
    res = await client.post(
        "/api/v1/tokens", json={"email": "pat.o'neil@example.com", "password": "pw"},
    )
    assert res.status_code == 200
    assert res.json()["data"]["token"]["email"] == "pat.o'neil@example.com"


async def test_register_invalid_body_is_400_with_details(client):
    res = await client.post("/api/v1/users", json={**USER, "email": "not-an-email", "address": "  "})
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    fields = {d["field"] for d in error["details"]}
    assert "body.email" in fields
    assert "body.address" in fields


async def test_login_with_wrong_password_is_400(client, auth):
    res = await client.post(
        "/api/v1/tokens", json={"email": "ada@example.com", "password": "nope"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Invalid email or password"


async def test_profile_requires_session(client, auth):
    res = await client.get("/api/v1/users/ada@example.com")
    assert res.status_code == 401
    assert res.json()["error"]["message"] == "You must be logged in to do that"


async def test_profile_read_and_update(client, auth):
    res = await client.get("/api/v1/users/ada@example.com", headers=auth)
    assert res.json()["data"]["user"]["firstName"] == "Ada"

    res = await client.put(
        "/api/v1/users/ada@example.com", json={"address": "Ockham Park"}, headers=auth,
    )
    assert res.status_code == 200
    assert res.json()["data"]["user"]["address"] == "Ockham Park"


async def test_empty_update_is_400(client, auth):
    res = await client.put("/api/v1/users/ada@example.com", json={}, headers=auth)
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Missing fields to update"


async def test_foreign_profile_is_403(client, auth):
    await client.post("/api/v1/users", json=USER)
    res = await client.get("/api/v1/users/eve@example.com", headers=auth)
    assert res.status_code == 403


async def test_delete_own_user(client, auth):
    res = await client.delete("/api/v1/users/ada@example.com", headers=auth)
    assert res.status_code == 200
    assert res.json() == {"success": True, "data": {}}


async def test_token_inspect_extend_revoke(client, auth, clock):
    token_id = auth["token"]

    res = await client.get(f"/api/v1/tokens/{token_id}", headers=auth)
    assert res.json()["data"]["token"]["expires"] == START_MS + 3600 * 1000

    clock.advance(60_000)
    res = await client.put(f"/api/v1/tokens/{token_id}", json={"extend": True}, headers=auth)
    assert res.status_code == 200
    assert res.json()["data"]["token"]["expires"] == START_MS + 60_000 + 3600 * 1000

    res = await client.delete(f"/api/v1/tokens/{token_id}", headers=auth)
    assert res.status_code == 200
    res = await client.get(f"/api/v1/tokens/{token_id}", headers=auth)
    assert res.status_code == 401


async def test_extend_requires_literal_true(client, auth):
    for body in ({"extend": False}, {"extend": "true"}, {}):
        res = await client.put(f"/api/v1/tokens/{auth['token']}", json=body, headers=auth)
        assert res.status_code == 400


async def test_expired_session_is_401(client, auth, clock):
    clock.advance(3600 * 1000 + 1)
    res = await client.get("/api/v1/users/ada@example.com", headers=auth)
    assert res.status_code == 401
    assert "expired" in res.json()["error"]["message"]
