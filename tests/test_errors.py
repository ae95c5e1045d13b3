"""
Error Handling Tests
====================

Status mapping and failure envelopes produced by the exception handlers.
"""

import httpx
import pytest
from fastapi import FastAPI

from app.core.errors import (
    ConflictError,
    DomainError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    setup_exception_handlers,
    status_code_for,
)
from app.schemas.task import TaskCreate


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (ValidationError(), 400),
        (UnauthorizedError(), 401),
        (ForbiddenError(), 403),
        (NotFoundError(), 404),
        (ConflictError(), 409),
        (InternalError(), 500),
        (DomainError(), 500),
    ],
)
def test_status_code_for(error, expected):
    assert status_code_for(error) == expected


def test_field_is_only_included_when_set():
    assert ValidationError("Title is required", field="title").to_dict() == {
        "code": "VALIDATION_ERROR",
        "message": "Title is required",
        "field": "title",
    }
    assert "field" not in NotFoundError().to_dict()


@pytest.fixture
async def error_client():
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/unauthorized")
    async def unauthorized():
        raise UnauthorizedError("Not authorized, no token")

    @app.get("/internal")
    async def internal():
        raise InternalError()

    @app.get("/crash")
    async def crash():
        raise RuntimeError("boom")

    @app.get("/model")
    async def model():
        TaskCreate.model_validate({"description": "d", "deadline": "2026-01-01"})

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.mark.asyncio
async def test_unauthorized_carries_bearer_challenge(error_client):
    response = await error_client.get("/unauthorized")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json() == {
        "success": False,
        "message": "Not authorized, no token",
        "error": {"code": "AUTH_002", "message": "Not authorized, no token"},
    }


@pytest.mark.asyncio
async def test_internal_domain_error(error_client):
    response = await error_client.get("/internal")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"


@pytest.mark.asyncio
async def test_unhandled_exception_is_generic(error_client):
    response = await error_client.get("/crash")

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "An unexpected error occurred"
    # Outside production the exception text is included for debugging
    assert body["error"]["detail"] == "RuntimeError: boom"


@pytest.mark.asyncio
async def test_model_validation_error_is_bad_request(error_client):
    response = await error_client.get("/model")

    assert response.status_code == 400
    assert response.json()["error"]["field"] == "title"
