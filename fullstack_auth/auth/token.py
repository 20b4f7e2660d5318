"""
JWT Token Service.

Issues and validates the stateless session tokens handed out by register
and login. Tokens are HS256-signed and carry:
- sub: account id
- email: account email
- iat: issued-at (unix seconds)
- exp: expiry (unix seconds)

The server keeps no session table; a token is valid exactly when its
signature checks out against the configured secret and exp is in the future.
"""

import logging

import jwt
import pydantic

from ..exceptions import AuthenticationError
from ..utils import isodatetime
from .schemas import TokenPayload

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "email", "iat", "exp"]
SECONDS_PER_DAY = 24 * 60 * 60


class TokenIssuer:
    """Signs and verifies access tokens with a server-held secret."""

    def __init__(self, secret_key: str, expiry_days: int = 7):
        """
        Args:
            secret_key: HMAC secret used for signing and verification
            expiry_days: Token lifetime in days
        """
        self._secret_key = secret_key
        self.expiry_days = expiry_days

    def issue(self, account_id: str, email: str) -> str:
        """
        Generate an access token for an account.

        Args:
            account_id: Value of the ``sub`` claim
            email: Value of the ``email`` claim

        Returns:
            Compact JWT string
        """
        now = isodatetime.now_unix()
        payload = {
            "sub": account_id,
            "email": email,
            "iat": now,
            "exp": now + self.expiry_days * SECONDS_PER_DAY,
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenPayload:
        """
        Validate a token and return its claims.

        Raises:
            AuthenticationError: If the token is expired, malformed, signed
                with another secret, or missing a required claim
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token expired")
            raise AuthenticationError("Token has expired", {"code": "token_expired"})
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid JWT token: {e}")
            raise AuthenticationError("Invalid token", {"code": "invalid_token"})

        try:
            return TokenPayload(**payload)
        except pydantic.ValidationError as e:
            logger.warning(f"JWT claims have unexpected types: {e.error_count()} error(s)")
            raise AuthenticationError("Invalid token", {"code": "invalid_token"})
