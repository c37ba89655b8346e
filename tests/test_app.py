from fastapi.testclient import TestClient

from app import create_app
from database import DatabaseManager
from conftest import BOARD


def test_health(client, make_thread):
    make_thread()

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["threads"] == 1


def test_security_headers(client):
    response = client.get(f"/api/threads/{BOARD}")

    assert response.headers["x-frame-options"] == "SAMEORIGIN"
    assert response.headers["x-dns-prefetch-control"] == "off"
    assert response.headers["referrer-policy"] == "same-origin"
    assert response.headers["x-content-type-options"] == "nosniff"


def test_request_too_large(client):
    response = client.post(
        f"/api/threads/{BOARD}",
        content=b"x" * (1024 * 1024 + 1),
        headers={"content-type": "application/json"}
    )

    assert response.status_code == 413


def test_malformed_json(client):
    response = client.post(
        f"/api/threads/{BOARD}", content=b"{not json", headers={"content-type": "application/json"}
    )

    assert response.status_code == 400


def test_unknown_route_is_json_404(client):
    response = client.get("/api/nothing")

    assert response.status_code == 404
    assert response.json()["error"] == "Not Found"


def test_store_failure_is_500(monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("store unavailable")

    database = DatabaseManager(":memory:")
    monkeypatch.setattr(database, "get_threads_by_board", broken)

    with TestClient(create_app(database), raise_server_exceptions=False) as client:
        response = client.get(f"/api/threads/{BOARD}")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Internal Server Error",
        "message": "An unexpected error occurred",
        "details": None,
    }
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "SAMEORIGIN"


def test_lifespan_closes_database():
    database = DatabaseManager(":memory:")

    with TestClient(create_app(database)):
        assert database.is_connected

    assert not database.is_connected
