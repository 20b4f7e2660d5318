"""Authentication Pydantic schemas for API validation."""

from .auth import (
    SignupRequest,
    SigninRequest,
    UserResponse,
    AuthResponse,
    CurrentUserResponse,
    TokenPayload,
)

__all__ = [
    "SignupRequest",
    "SigninRequest",
    "UserResponse",
    "AuthResponse",
    "CurrentUserResponse",
    "TokenPayload",
]
