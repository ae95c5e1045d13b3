"""
Authentication Service
======================

Business logic for user registration, login and session resolution.
"""

import logging
from typing import Optional
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ConflictError,
    ErrorCodes,
    UnauthorizedError,
    ValidationError,
)
from app.core.security import (
    TokenClaims,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)
from app.models.user import User
from app.utils.helpers import generate_uuid

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Trim and lower-case an email address."""
    return email.strip().lower()


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)."""
        stmt = select(User).where(func.lower(User.email) == normalize_email(email))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get user by ID."""
        return await self.db.get(User, user_id)

    async def signup(
        self,
        name: str,
        email: str,
        password: str,
    ) -> tuple[User, str]:
        """
        Register a new user.

        Returns:
            The created user and a freshly issued token

        Raises:
            ValidationError: If any field is missing or blank
            ConflictError: If the email is already registered
        """
        for field, value in (("name", name), ("email", email), ("password", password)):
            if not value or not value.strip():
                raise ValidationError(
                    "Please provide name, email, and password",
                    field=field,
                )

        email = normalize_email(email)
        if await self.get_user_by_email(email) is not None:
            raise ConflictError(
                "Email already registered",
                code=ErrorCodes.AUTH_EMAIL_EXISTS,
                field="email",
            )

        user = User(
            user_id=generate_uuid(),
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            raise ConflictError(
                "Email already registered",
                code=ErrorCodes.AUTH_EMAIL_EXISTS,
                field="email",
            )

        logger.info("User %s registered", user.user_id)
        return user, issue_token(user.user_id)

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """
        Authenticate by email and password.

        Raises:
            UnauthorizedError: Unknown email or wrong password (same message
                for both)
        """
        user = await self.get_user_by_email(email or "")

        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning("Failed login attempt for %s", normalize_email(email or ""))
            raise UnauthorizedError(
                "Invalid email or password",
                code=ErrorCodes.AUTH_INVALID_CREDENTIALS,
            )

        return user, issue_token(user.user_id)

    async def resolve_token(self, token: str) -> tuple[User, TokenClaims]:
        """
        Verify a bearer token and load the user it names.

        Raises:
            UnauthorizedError: Invalid/expired token or the user no longer exists
        """
        claims = verify_token(token)
        user = await self.get_user_by_id(claims.user_id)

        if user is None:
            raise UnauthorizedError(
                "User not found",
                code=ErrorCodes.AUTH_USER_NOT_FOUND,
            )

        return user, claims
