"""
Request Logging Tests
=====================

The per-request log line names the full route pattern.
"""

import logging
from types import SimpleNamespace

import pytest

from app.main import route_template


@pytest.mark.parametrize(
    ("route_path", "request_path", "expected"),
    [
        ("/api/tasks/{task_id}", "/api/tasks/abc", "/api/tasks/{task_id}"),
        ("", "/api/tasks", "/api/tasks"),
        ("/{task_id}", "/api/tasks/abc", "/api/tasks/{task_id}"),
        ("/{task_id}/toggle", "/api/tasks/abc/toggle", "/api/tasks/{task_id}/toggle"),
        ("/me", "/api/auth/me", "/api/auth/me"),
        ("/", "/", "/"),
    ],
)
def test_route_template_includes_router_prefix(route_path, request_path, expected):
    scope = {"route": SimpleNamespace(path=route_path), "path": request_path}

    assert route_template(scope) == expected


def test_route_template_uses_root_path_for_mounts():
    scope = {
        "route": SimpleNamespace(path="/{task_id}"),
        "root_path": "/api/tasks",
        "path": "/abc",
    }

    assert route_template(scope) == "/api/tasks/{task_id}"


def test_unmatched_request_logs_raw_path():
    assert route_template({"path": "/nowhere"}) == "/nowhere"


@pytest.mark.asyncio
async def test_request_line_carries_full_route(client, auth_headers, caplog):
    caplog.set_level(logging.INFO, logger="app.main")

    response = await client.post(
        "/api/tasks",
        json={
            "title": "Write report",
            "description": "Quarterly numbers",
            "deadline": "2030-01-01T00:00:00Z",
        },
        headers=auth_headers,
    )
    task_id = response.json()["data"]["id"]
    await client.get(f"/api/tasks/{task_id}", headers=auth_headers)

    lines = [r.getMessage() for r in caplog.records if r.name == "app.main"]
    assert any(line.startswith("POST /api/tasks 201 ") for line in lines)
    assert any(line.startswith("GET /api/tasks/{task_id} 200 ") for line in lines)
