import pytest
from fastapi.testclient import TestClient

from app import create_app
from database import DatabaseManager

BOARD = "test_board"
PASSWORD = "valid_password"
WRONG_PASSWORD = "invalid_password"


@pytest.fixture
async def db():
    database = DatabaseManager(":memory:")
    await database.connect()
    yield database
    await database.close()


@pytest.fixture
def client():
    # the lifespan connects the in-memory store on enter and closes it on exit
    with TestClient(create_app(DatabaseManager(":memory:"))) as test_client:
        yield test_client


@pytest.fixture
def make_thread(client):
    def _make_thread(text="Test Thread", password=PASSWORD, board=BOARD):
        response = client.post(f"/api/threads/{board}", json={"text": text, "delete_password": password})
        assert response.status_code == 200
        return response.json()
    return _make_thread


@pytest.fixture
def make_reply(client):
    def _make_reply(thread_id, text="Test Reply", password=PASSWORD, board=BOARD):
        response = client.post(
            f"/api/replies/{board}",
            json={"thread_id": thread_id, "text": text, "delete_password": password}
        )
        assert response.status_code == 200
        return response.json()
    return _make_reply
