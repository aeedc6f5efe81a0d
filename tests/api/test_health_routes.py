"""Health probes, framework error envelopes and request logging."""

import json
import logging

import pytest

from storefront.infrastructure.observability import JSONFormatter


async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_with_writable_storage(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"] == {"storage": "healthy"}


async def test_readiness_fails_without_storage(client, services, monkeypatch):
    async def unhealthy():
        return False

    monkeypatch.setattr(services.store, "health_check", unhealthy)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "storage_unavailable"


async def test_unknown_route_uses_envelope(client):
    res = await client.get("/api/v1/nothing-here")
    assert res.status_code == 404
    body = res.json()
    assert body["success"] is False
    assert body["error"]["statusCode"] == 404


async def test_wrong_method_uses_envelope(client):
    res = await client.patch("/api/v1/users")
    assert res.status_code == 405
    assert res.json()["error"]["error"] == "Method Not Allowed"


class _JSONLines(logging.Handler):
    """Formats at emit time, inside the request's context."""

    def __init__(self):
        super().__init__()
        self.setFormatter(JSONFormatter())
        self.lines: list[dict] = []

    def emit(self, record):
        self.lines.append(json.loads(self.format(record)))


@pytest.fixture
def request_log():
    target = logging.getLogger("storefront.infrastructure.observability")
    handler, level = _JSONLines(), target.level
    target.addHandler(handler)
    target.setLevel(logging.INFO)
    yield handler.lines
    target.removeHandler(handler)
    target.setLevel(level)


async def test_request_id_generated_and_logged(client, request_log):
    res = await client.get("/api/v1/health/")
    request_id = res.headers["x-request-id"]
    [line] = [line for line in request_log if line["message"] == "Request handled"]
    assert line["request_id"] == request_id
    assert line["method"] == "GET"
    assert line["path"] == "/api/v1/health/"
    assert line["status"] == 200


async def test_request_id_echoed(client):
    res = await client.get("/api/v1/health/", headers={"X-Request-Id": "abc123"})
    assert res.headers["x-request-id"] == "abc123"
