"""Pydantic schemas for authentication requests and responses.

Request schemas forbid unknown fields. Password rules mirror the sign-up
form so the server never relies on client-side checks.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email

# bcrypt ignores input beyond 72 bytes; newer releases reject it outright
BCRYPT_MAX_PASSWORD_BYTES = 72
MIN_PASSWORD_LENGTH = 8


def _check_password_size(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
    return value


def _check_email(value: str) -> str:
    # email-validator normalizes the domain; the address is kept as submitted
    validate_email(value)
    return value


# ============================================================================
# Request Schemas
# ============================================================================


class SignupRequest(BaseModel):
    """Body of POST /auth/register."""

    model_config = ConfigDict(extra="forbid")

    email: str
    name: str = Field(..., min_length=1, max_length=100)
    password: str

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Name must not be blank")
        return stripped

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        """
        Enforce the sign-up password policy:
        - At least 8 characters
        - At least one letter
        - At least one number
        - At least one special character
        """
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if not re.search(r"[A-Za-z]", v):
            raise ValueError("Password must contain at least one letter")
        if not re.search(r"[0-9]", v):
            raise ValueError("Password must contain at least one number")
        if not re.search(r"[^A-Za-z0-9]", v):
            raise ValueError("Password must contain at least one special character")
        return _check_password_size(v)


class SigninRequest(BaseModel):
    """Body of POST /auth/login.

    Only shape is checked here. Policy is not re-applied at login so a wrong
    password always reaches credential verification.
    """

    model_config = ConfigDict(extra="forbid")

    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_size(cls, v: str) -> str:
        return _check_password_size(v)


# ============================================================================
# Response Schemas
# ============================================================================


class UserResponse(BaseModel):
    """Public view of an account. Never carries the password hash."""

    id: str
    email: str
    name: str


class AuthResponse(BaseModel):
    """Returned by register and login."""

    message: str
    user: UserResponse
    token: str


class CurrentUserResponse(BaseModel):
    """Returned by GET /auth/me."""

    user: UserResponse


# ============================================================================
# Token Schemas
# ============================================================================


class TokenPayload(BaseModel):
    """Verified JWT claims."""

    sub: str
    email: str
    iat: int
    exp: int
