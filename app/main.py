"""
Task Manager API - Main Application
===================================

FastAPI application entry point with middleware configuration
and route registration.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import newrelic.agent

from app.config import settings

# Configure logging for the application (root logger defaults to WARNING)
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.errors import setup_exception_handlers
from app.core.rate_limit import create_rate_limit_dependency
from app.db.session import close_db, init_db
from app.services.cache import close_redis, init_redis
from app.utils.helpers import utc_now

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# =============================================================================
# Request Logging + New Relic Enrichment Middleware (Raw ASGI)
# =============================================================================

def route_template(scope) -> str:
    """
    Full route pattern for a request, e.g. "/api/tasks/{task_id}".

    The matched route's path may be relative to the router it was
    included under, so any leading segments it lacks are taken from the
    concrete request path. Unmatched requests fall back to the raw path.
    """
    full_path = scope.get("path") or ""
    root_path = scope.get("root_path") or ""
    if root_path and not full_path.startswith(root_path):
        full_path = root_path.rstrip("/") + full_path

    template = getattr(scope.get("route"), "path", None)
    if template is None:
        return full_path or "unknown"

    concrete = [part for part in full_path.split("/") if part]
    relative = [part for part in template.split("/") if part]
    prefix = concrete[: max(len(concrete) - len(relative), 0)]
    return "/" + "/".join(prefix + relative)


class RequestContextMiddleware:
    """
    Raw ASGI middleware that logs one line per request and enriches the
    current New Relic transaction with the same attributes.

    Raw ASGI (rather than BaseHTTPMiddleware) keeps the route handler in
    the same task so contextvars-based tracing keeps working.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500  # default until we capture the real one

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)

            route_path = route_template(scope)
            # Set by the auth dependency
            state = scope.get("state") or {}
            user_id = state.get("user_id") if isinstance(state, dict) else None

            logger.info(
                "%s %s %s %.2fms",
                scope.get("method", ""),
                route_path,
                status_code,
                duration_ms,
            )

            txn = newrelic.agent.current_transaction()
            if txn:
                client = scope.get("client")
                newrelic.agent.add_custom_attributes([
                    ("http.method", scope.get("method", "")),
                    ("http.route", route_path),
                    ("http.status_code", status_code),
                    ("http.duration_ms", duration_ms),
                    ("http.client_ip", client[0] if client else "unknown"),
                    ("environment", settings.ENVIRONMENT),
                ])
                if user_id:
                    newrelic.agent.add_custom_attribute("enduser.id", user_id)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown of the database and Redis connections.
    """
    logger.info("Starting Task Manager API (%s)...", settings.ENVIRONMENT)

    try:
        await init_db()
    except Exception as e:
        # Keep serving health checks even if the DB is down
        logger.error("Database connection failed: %s", e)

    if settings.RATE_LIMIT_ENABLED:
        try:
            await init_redis()
        except Exception as e:
            logger.warning("Redis connection failed, rate limiting fails open: %s", e)

    yield

    logger.info("Shutting down Task Manager API...")
    await close_db()
    await close_redis()


# Create FastAPI application
app = FastAPI(
    title="Task Manager API",
    description="""
## Personal Task Manager Backend

Users register, authenticate with a bearer token and manage their own tasks.

### Features
- **Authentication**: signup, login, current user, logout
- **Tasks**: CRUD, status toggle, overdue tracking, statistics
- **Filtering**: by status, priority and title search

### Rate Limits
- 100 requests per 10 minutes per client on all API routes
    """,
    version=API_VERSION,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    openapi_url="/openapi.json" if not settings.is_production else None,
    lifespan=lifespan,
    responses={
        400: {"description": "Validation error"},
        401: {"description": "Not authenticated"},
        429: {"description": "Rate limit exceeded"},
        500: {"description": "Internal server error"},
    },
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging + APM enrichment
app.add_middleware(RequestContextMiddleware)

# Setup exception handlers
setup_exception_handlers(app)


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Health check endpoint.
    """
    return {
        "success": True,
        "status": "healthy",
        "version": API_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": utc_now().isoformat(),
    }


@app.get("/", tags=["Health"])
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "success": True,
        "name": "Task Manager API",
        "message": "Task Manager API is running",
        "version": API_VERSION,
        "endpoints": {
            "auth": f"{settings.API_PREFIX}/auth",
            "tasks": f"{settings.API_PREFIX}/tasks",
        },
    }


# =============================================================================
# API Routes
# =============================================================================

rate_limited = [Depends(create_rate_limit_dependency("api"))]

from app.api.v1 import auth
app.include_router(
    auth.router,
    prefix=f"{settings.API_PREFIX}/auth",
    tags=["Authentication"],
    dependencies=rate_limited,
)

from app.api.v1 import tasks
app.include_router(
    tasks.router,
    prefix=f"{settings.API_PREFIX}/tasks",
    tags=["Tasks"],
    dependencies=rate_limited,
)
