"""
Shared fixtures.

The whole suite runs against an in-memory SQLite database; the environment is
set before anything from kitstore is imported so settings pick it up.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EVENTS_BACKEND"] = "local"

import pytest
from fastapi.testclient import TestClient

import kitstore.data.models  # noqa: F401
from kitstore.data.database import Base, SessionLocal, engine
from kitstore.main import create_app


class RecordingPublisher:
    """Stands in for the socket hub and keeps every published event."""

    def __init__(self):
        self.events = []

    def publish(self, event, payload):
        self.events.append((event, payload))


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    yield db
    db.close()


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def publisher(app):
    recorder = RecordingPublisher()
    app.state.publisher = recorder
    return recorder


@pytest.fixture
def test_client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def product_payload():
    def make(**overrides):
        payload = {
            "title": "Camiseta titular",
            "description": "Camiseta oficial de local",
            "code": "LOC-1",
            "price": 100,
            "status": True,
            "stock": 5,
            "category": "Camisetas locales",
        }
        payload.update(overrides)
        return payload

    return make


@pytest.fixture
def create_product(test_client, product_payload):
    def create(**overrides):
        response = test_client.post("/api/products", json=product_payload(**overrides))
        assert response.status_code == 200, response.text
        return response.json()["id"]

    return create


@pytest.fixture
def create_cart(test_client):
    def create():
        response = test_client.post("/api/carts")
        assert response.status_code == 200
        return response.json()["message"].rsplit(" ", 1)[-1]

    return create
