"""
Authentication API Endpoints
============================

Handles user signup, login, current-user lookup and logout.
"""

import logging

from fastapi import APIRouter, status

from app.dependencies import CurrentSession, DBSession
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutResponse,
    MeResponse,
    SignupRequest,
)
from app.schemas.common import ErrorResponse
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def signup(
    user_data: SignupRequest,
    db: DBSession,
):
    """
    Register a new user account and return a token.
    """
    auth_service = AuthService(db)
    user, token = await auth_service.signup(
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
    )

    return {
        "success": True,
        "message": "Account created successfully",
        "data": {"user": user.to_api_dict(), "token": token},
    }


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(
    credentials: LoginRequest,
    db: DBSession,
):
    """
    Authenticate user and return a token.
    """
    auth_service = AuthService(db)
    user, token = await auth_service.login(
        email=credentials.email,
        password=credentials.password,
    )

    return {
        "success": True,
        "message": "Login successful",
        "data": {"user": user.to_api_dict(), "token": token},
    }


@router.get(
    "/me",
    response_model=MeResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_me(session: CurrentSession):
    """Return the authenticated user."""
    return {
        "success": True,
        "data": {"user": session.user.to_api_dict()},
    }


@router.post(
    "/logout",
    response_model=LogoutResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def logout(session: CurrentSession):
    """
    Logout user (client should discard the token).

    Tokens are stateless; they stay valid until they expire.
    """
    logger.info("User %s logged out", session.user_id)
    return LogoutResponse(
        success=True,
        message="Logged out successfully",
    )
