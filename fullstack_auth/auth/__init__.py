"""Authentication module for the Fullstack Auth API.

This module provides authentication functionality:
- Schema validation for auth operations
- JWT token issuing and verification
- Password hashing and verification
- Audit trail of authentication events
- Bearer-token guard for protected endpoints

Auth endpoints (under settings.api_prefix, default /api):
- POST /auth/register - Create account and return JWT token
- POST /auth/login - Authenticate and return JWT token
- GET /auth/me - Get current user info
"""

from . import schemas, token

__all__ = ["schemas", "token"]
