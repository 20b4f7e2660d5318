"""Authentication service.

Orchestrates signup, signin and current-user lookup over the account store,
the password hasher and the token issuer. Every collaborator is passed in
by create_app(); nothing here reads global configuration.

Each operation opens its own Core and closes it before returning, so
concurrent requests never share a connection. Password hashing happens
outside any open transaction.
"""

import logging
import sqlite3

from ..db import Database
from ..exceptions import AuthenticationError, ConflictError
from ..utils import uid
from . import audit
from .audit import AuditSink
from .password import PasswordHasher
from .schemas import (
    AuthResponse,
    CurrentUserResponse,
    SigninRequest,
    SignupRequest,
    UserResponse,
)
from .token import TokenIssuer

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
USER_NOT_FOUND = "User not found"
EMAIL_TAKEN = "User with this email already exists"


def _row_to_user_response(row: sqlite3.Row) -> UserResponse:
    """Project an account row onto its public fields."""
    return UserResponse(id=row["id"], email=row["email"], name=row["name"])


class AuthService:
    """Signup, signin and current-user operations."""

    def __init__(
        self,
        database: Database,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        audit_sink: AuditSink | None = None,
    ):
        self.database = database
        self.hasher = hasher
        self.tokens = tokens
        self.audit = audit_sink or AuditSink()
        self._placeholder_hash = None

    def _unknown_account_hash(self) -> str:
        """Hash at the configured work factor, compared against for unknown emails.

        Built on first use and kept for the lifetime of the service.
        """
        if self._placeholder_hash is None:
            self._placeholder_hash = self.hasher.hash(uid.generate_uuid())
        return self._placeholder_hash

    def signup(self, data: SignupRequest) -> AuthResponse:
        """
        Register a new account and issue a token for it.

        Raises:
            ConflictError: If an account with this email already exists.
                Also raised when a concurrent signup wins the race; the
                UNIQUE constraint on email is the real guarantee.
        """
        self.audit.record("signup", audit.ATTEMPT, email=data.email)

        with self.database.get_core() as core:
            existing = core.users.find_one(email=data.email)
        if existing is not None:
            self.audit.record("signup", audit.FAILURE, email=data.email, reason="email_taken")
            raise ConflictError(EMAIL_TAKEN, {"email": data.email})

        password_hash = self.hasher.hash(data.password)

        try:
            with self.database.get_core() as core:
                row = core.users.create({
                    "email": data.email,
                    "name": data.name,
                    "password_hash": password_hash,
                })
        except sqlite3.IntegrityError:
            logger.warning(f"Signup lost uniqueness race for {data.email}")
            self.audit.record("signup", audit.FAILURE, email=data.email, reason="email_taken")
            raise ConflictError(EMAIL_TAKEN, {"email": data.email})

        user = _row_to_user_response(row)
        token = self.tokens.issue(user.id, user.email)

        logger.info(f"Account created: {user.email} ({user.id})")
        self.audit.record("signup", audit.SUCCESS, email=user.email, account_id=user.id)

        return AuthResponse(message="User created successfully", user=user, token=token)

    def signin(self, data: SigninRequest) -> AuthResponse:
        """
        Verify credentials and issue a token.

        Unknown email and wrong password fail identically and both run one
        bcrypt verification, so neither the response nor its timing reveals
        which accounts exist.

        Raises:
            AuthenticationError: If the credentials are invalid
        """
        self.audit.record("signin", audit.ATTEMPT, email=data.email)

        with self.database.get_core() as core:
            row = core.users.find_one(email=data.email)

        if row is None:
            self.hasher.verify(data.password, self._unknown_account_hash())
            self.audit.record("signin", audit.FAILURE, email=data.email, reason="unknown_email")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not self.hasher.verify(data.password, row["password_hash"]):
            self.audit.record("signin", audit.FAILURE, email=data.email, reason="wrong_password")
            raise AuthenticationError(INVALID_CREDENTIALS)

        user = _row_to_user_response(row)
        token = self.tokens.issue(user.id, user.email)

        logger.info(f"Successful login: {user.email}")
        self.audit.record("signin", audit.SUCCESS, email=user.email, account_id=user.id)

        return AuthResponse(message="Sign in successful", user=user, token=token)

    def get_current_user(self, account_id: str) -> CurrentUserResponse:
        """
        Look up the account behind a verified token.

        Raises:
            AuthenticationError: If the account no longer exists
        """
        self.audit.record("current_user", audit.ATTEMPT, account_id=account_id)

        with self.database.get_core() as core:
            row = core.users.find_by_id(account_id)

        if row is None:
            self.audit.record("current_user", audit.FAILURE, account_id=account_id, reason="not_found")
            raise AuthenticationError(USER_NOT_FOUND, {"user_id": account_id})

        self.audit.record("current_user", audit.SUCCESS, account_id=account_id)
        return CurrentUserResponse(user=_row_to_user_response(row))
