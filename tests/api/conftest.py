"""API test fixtures — FastAPI app with get_services overridden.

Invariants:
    - The app's lifespan is not run; the service container comes from the
      shared `services` fixture (tmp_path storage, fake gateway and notifier)
    - Dependency overrides are cleared after every test
"""

import pytest
from httpx import ASGITransport, AsyncClient

from storefront.api.dependencies import get_services
from storefront.main import app


@pytest.fixture
async def client(services):
    app.dependency_overrides[get_services] = lambda: services
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def auth(client):
    """Register + login through the API; returns the session header."""
    res = await client.post("/api/v1/users", json={
        "firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com",
        "password": "s3cret", "address": "12 St James's Square",
    })
    assert res.status_code == 200
    res = await client.post(
        "/api/v1/tokens", json={"email": "ada@example.com", "password": "s3cret"},
    )
    return {"token": res.json()["data"]["token"]["id"]}
