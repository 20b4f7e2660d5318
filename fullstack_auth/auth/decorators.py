"""Authentication decorators for protected endpoints.

- @auth_required - Requires a valid bearer token

The decorator verifies the token with the TokenIssuer that create_app()
registered on the application, then stores the claims in flask.g.
"""

import logging
from functools import wraps

from flask import current_app, g, request

from ..exceptions import AuthenticationError
from .service import AuthService

logger = logging.getLogger(__name__)

EXTENSION_KEY = "fullstack_auth"
EXPECTED_HEADER = "Authorization: Bearer <token>"


def get_auth_service() -> AuthService:
    """Return the AuthService wired into the current application."""
    return current_app.extensions[EXTENSION_KEY]


def _authenticate_request():
    """
    Verify the bearer token on the current request.

    Stores authenticated account information in flask.g:
    - g.account_id: Account ID (token ``sub``)
    - g.email: Account email

    Raises:
        AuthenticationError: If the header is missing or malformed, or the
            token is invalid or expired
    """
    auth_header = request.headers.get("Authorization")
    if auth_header is None:
        logger.warning("Unauthenticated request to protected endpoint")
        raise AuthenticationError(
            "Missing authorization header",
            {"expected": EXPECTED_HEADER}
        )

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise AuthenticationError(
            "Invalid authorization header format",
            {"expected": EXPECTED_HEADER}
        )

    payload = get_auth_service().tokens.verify(parts[1])

    g.account_id = payload.sub
    g.email = payload.email
    logger.debug(f"JWT authentication successful for {g.email}")


def auth_required(f):
    """
    Decorator to require a valid bearer token for endpoint access.

    Example:
    ```python
    @auth_bp.get("/auth/me")
    @auth_required
    def me():
        account_id = g.account_id
        ...
    ```
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        _authenticate_request()
        return f(*args, **kwargs)

    return wrapper
