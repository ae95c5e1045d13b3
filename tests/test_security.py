"""
Security Tests
==============

Password hashing and token issue/verify.
"""

import base64
import json
from datetime import timedelta
import uuid

import pytest
from jose import jwt

from app.config import settings
from app.core.errors import ErrorCodes, UnauthorizedError
from app.core.security import hash_password, issue_token, verify_password, verify_token


def test_password_hash_is_one_way():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_verify_password_with_garbage_hash():
    assert verify_password("secret123", "not-a-bcrypt-hash") is False


def test_issued_token_round_trips_user_id():
    user_id = uuid.uuid4()

    claims = verify_token(issue_token(user_id))

    assert claims.user_id == user_id
    assert claims.expires_at - claims.issued_at == timedelta(days=settings.JWT_EXPIRE_DAYS)


def test_expired_token_is_rejected():
    token = issue_token(uuid.uuid4(), expires_delta=timedelta(seconds=-5))

    with pytest.raises(UnauthorizedError) as exc_info:
        verify_token(token)
    assert exc_info.value.code == ErrorCodes.AUTH_TOKEN_EXPIRED


def test_tampered_token_is_rejected():
    token = issue_token(uuid.uuid4())
    header, payload, signature = token.split(".")

    claims = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
    claims["sub"] = str(uuid.uuid4())
    forged_payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()

    with pytest.raises(UnauthorizedError) as exc_info:
        verify_token(".".join([header, forged_payload, signature]))
    assert exc_info.value.code == ErrorCodes.AUTH_INVALID_TOKEN


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode(
        {"sub": str(uuid.uuid4()), "type": "access", "exp": 4102444800},
        "another-secret-that-is-also-32-chars-long",
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(UnauthorizedError):
        verify_token(forged)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_is_rejected(token):
    with pytest.raises(UnauthorizedError):
        verify_token(token)


def test_token_without_user_id_is_rejected():
    token = jwt.encode(
        {"sub": "not-a-uuid", "type": "access", "exp": 4102444800},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(UnauthorizedError):
        verify_token(token)
