import pytest
from fastapi.testclient import TestClient

from toddler_fun.config import Settings
from toddler_fun.main import create_app
from toddler_fun.middleware import WriteGateMiddleware

BUBBLES = {"category": "Outdoor", "title": "Bubbles", "description": "Blow bubbles"}


def _gate(**kwargs) -> WriteGateMiddleware:
    return WriteGateMiddleware(app=None, settings=Settings(**kwargs))


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
def test_production_blocks_catalog_writes(method):
    gate = _gate(environment="production")
    assert gate.is_blocked(method, "/activities")
    assert gate.is_blocked(method, "/activities/")


def test_override_allows_writes_in_production():
    assert not _gate(environment="production", allow_production_writes=True).is_blocked("POST", "/activities")


def test_reads_and_other_paths_pass():
    gate = _gate(environment="prod")
    assert not gate.is_blocked("GET", "/activities")
    assert not gate.is_blocked("POST", "/activities/3/completions")
    assert not gate.is_blocked("POST", "/env-check")


def test_development_passes():
    assert not _gate(environment="development").is_blocked("DELETE", "/activities")


def _prod_client(db_url, allow=False):
    settings = Settings(database_url=db_url, environment="production", allow_production_writes=allow)
    return TestClient(create_app(settings))


def test_blocked_post_creates_nothing(db_url):
    with _prod_client(db_url) as client:
        before = len(client.get("/activities").json())
        resp = client.post("/activities", json=BUBBLES)
        assert resp.status_code == 403
        body = resp.json()
        assert "development" in body["error"]
        assert "ALLOW_PRODUCTION_WRITES" in body["hint"]
        assert len(client.get("/activities").json()) == before


def test_blocked_put_and_delete(db_url):
    with _prod_client(db_url) as client:
        assert client.put("/activities", json={"id": "1", "title": "x"}).status_code == 403
        assert client.delete("/activities", params={"id": "1"}).status_code == 403


def test_override_lets_writes_through(db_url):
    with _prod_client(db_url, allow=True) as client:
        assert client.post("/activities", json=BUBBLES).status_code == 201
        assert client.get("/env-check").json()["writesEnabled"] is True


def test_completions_not_gated(db_url):
    with _prod_client(db_url, allow=True) as client:
        created = client.post("/activities", json=BUBBLES).json()
    with _prod_client(db_url) as client:
        resp = client.post(f"/activities/{created['id']}/completions")
        assert resp.status_code == 200
        assert resp.json()["completionCount"] == 1
