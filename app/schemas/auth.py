"""
Authentication Schemas
======================

Pydantic schemas for authentication endpoints.

Name and email are trimmed; passwords are kept exactly as typed.
"""

from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class SignupRequest(BaseModel):
    """Request schema for user registration."""

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("name", "email", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are unique case-insensitively."""
        return v.lower()


class LoginRequest(BaseModel):
    """Request schema for user login."""

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserData(BaseModel):
    """Public user representation."""

    id: str
    name: str
    email: str
    createdAt: Optional[str] = None


class AuthData(BaseModel):
    """Payload returned by signup and login."""

    user: UserData
    token: str


class AuthResponse(BaseModel):
    """Response schema for signup/login."""

    success: bool = True
    message: Optional[str] = None
    data: AuthData


class MeData(BaseModel):
    user: UserData


class MeResponse(BaseModel):
    """Response schema for the current user."""

    success: bool = True
    data: MeData


class LogoutResponse(BaseModel):
    """Response schema for logout."""

    success: bool = True
    message: str = "Logged out successfully"
