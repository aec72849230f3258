"""Tests for health check endpoints and the application lifecycle."""
from fastapi.testclient import TestClient

from ecomm.config import Settings
from ecomm.main import create_app
from ecomm.storer.context import CallContext


def test_health_check(client):
    """Test basic health check."""
    response = client.get("/api/v1/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readiness_check(client):
    """Test readiness reports the database as reachable."""
    response = client.get("/api/v1/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] is True


def test_root_endpoint(client):
    """Test root endpoint returns API info."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert "docs" in data


def test_request_context_released_after_response(client):
    client.get("/api/v1/products/")

    assert client.app.state.active_calls == set()


def test_shutdown_cancels_in_flight_calls(engine):
    app = create_app(settings=Settings(DATABASE_URL="sqlite://"), engine=engine)
    ctx = CallContext(timeout=60)

    with TestClient(app):
        app.state.active_calls.add(ctx)
        assert not ctx.cancelled

    assert ctx.cancelled
