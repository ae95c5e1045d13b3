"""
Common Dependencies
===================

Shared dependencies used across the application.

Protected endpoints take an explicit ``AuthSession`` argument; nothing
about the caller is kept in module or global state.
"""

from dataclasses import dataclass
import logging
from typing import Annotated, Optional
import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ErrorCodes, UnauthorizedError
from app.core.security import TokenClaims
from app.db.session import get_db
from app.models.user import User
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

# Database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]

# Security scheme for JWT authentication
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthSession:
    """The authenticated identity for one request."""

    user: User
    claims: TokenClaims

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.user_id


async def get_auth_session(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DBSession,
) -> AuthSession:
    """
    Resolve the bearer token into an ``AuthSession``.

    Raises 401 if the header is missing or the token is invalid/expired.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(
            "Not authorized, no token",
            code=ErrorCodes.AUTH_NOT_AUTHENTICATED,
        )

    auth_service = AuthService(db)
    user, claims = await auth_service.resolve_token(credentials.credentials)

    # Read by the request middleware for log lines and APM attributes
    request.state.user_id = str(user.user_id)

    return AuthSession(user=user, claims=claims)


# Type alias for authenticated session dependency
CurrentSession = Annotated[AuthSession, Depends(get_auth_session)]
