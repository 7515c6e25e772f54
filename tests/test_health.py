"""
Health check endpoint tests.
"""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError

from app.main import app


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Health endpoint should return status ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_ready_check(client: AsyncClient, db):
    """Ready endpoint should answer once the database does."""
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


@pytest.mark.asyncio
async def test_api_root(client: AsyncClient):
    """API v1 root should return version and endpoint list."""
    response = await client.get("/api/v1/")
    assert response.status_code == 200
    data = response.json()
    assert data["api"] == "v1"
    assert "/bids/{bidId}/hire" in data["endpoints"]


@pytest.mark.asyncio
async def test_security_headers(client: AsyncClient):
    response = await client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


@pytest.mark.asyncio
async def test_ready_check_without_database(client: AsyncClient, monkeypatch):
    """Ready endpoint should answer 503 in the error envelope when the store is down."""
    unreachable = MagicMock()
    unreachable.connect.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    monkeypatch.setattr("app.main.engine", unreachable)

    response = await client.get("/ready")
    assert response.status_code == 503
    assert response.json() == {
        "error": {"code": "NOT_READY", "message": "Database unavailable", "status": 503}
    }
