"""Custom exceptions for the authentication API.

Every exception carries a human-readable ``message`` and an optional
``details`` dict. The Flask error handlers registered in ``main.create_app``
turn them into the JSON error envelope and the matching HTTP status.
"""


class FullstackAuthError(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(FullstackAuthError):
    """Request data failed validation."""


class AuthenticationError(FullstackAuthError):
    """Credentials or bearer token were rejected."""


class ConflictError(FullstackAuthError):
    """A unique resource already exists."""


class ResourceNotFound(FullstackAuthError):
    """Requested resource does not exist."""


class DatabaseError(FullstackAuthError):
    """Database operation failed."""
