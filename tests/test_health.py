"""
Health Check Tests
==================

Tests for the health check, root and unknown-route responses.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test the health check endpoint."""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()

    assert data["success"] is True
    assert data["status"] == "healthy"
    assert "version" in data
    assert data["environment"] == "test"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    """Test the root endpoint."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()

    assert data["name"] == "Task Manager API"
    assert data["endpoints"] == {"auth": "/api/auth", "tasks": "/api/tasks"}


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    response = await client.get("/api/nothing-here")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Route not found"
    assert body["error"]["code"] == "NOT_FOUND"
