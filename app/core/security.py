"""
Security Module
===============

Authentication and security utilities including:
- Password hashing with bcrypt
- JWT token issuing and verification
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.core.errors import ErrorCodes, UnauthorizedError

logger = logging.getLogger(__name__)

# Password hashing context using bcrypt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

TOKEN_TYPE_ACCESS = "access"


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of an access token."""

    user_id: uuid.UUID
    issued_at: datetime
    expires_at: datetime


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Stored hash to compare against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unrecognised or corrupted hash
        return False


def issue_token(
    user_id: uuid.UUID,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token for a user.

    Args:
        user_id: User's UUID, stored in the ``sub`` claim
        expires_delta: Custom lifetime (defaults to JWT_EXPIRE_DAYS)

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.JWT_EXPIRE_DAYS))

    to_encode = {
        "sub": str(user_id),
        "iat": now,
        "exp": expire,
        "type": TOKEN_TYPE_ACCESS,
    }

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str) -> TokenClaims:
    """
    Verify a token's signature, expiry and shape.

    Args:
        token: JWT token string

    Returns:
        The verified claims

    Raises:
        UnauthorizedError: If the token is malformed, tampered with or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise UnauthorizedError(
            "Token has expired",
            code=ErrorCodes.AUTH_TOKEN_EXPIRED,
        )
    except JWTError as exc:
        logger.warning("Token verification failed: %s", exc)
        raise UnauthorizedError(
            "Not authorized, token failed",
            code=ErrorCodes.AUTH_INVALID_TOKEN,
        )

    if payload.get("type") != TOKEN_TYPE_ACCESS or "exp" not in payload:
        raise UnauthorizedError(
            "Not authorized, token failed",
            code=ErrorCodes.AUTH_INVALID_TOKEN,
        )

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedError(
            "Not authorized, token failed",
            code=ErrorCodes.AUTH_INVALID_TOKEN,
        )

    return TokenClaims(
        user_id=user_id,
        issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
