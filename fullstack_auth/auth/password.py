"""Password hashing and verification.

Uses bcrypt with automatic salting and a configurable work factor.
The salt is embedded in the 60-character output, so only the hash is stored.
"""

import bcrypt

DEFAULT_WORK_FACTOR = 12


class PasswordHasher:
    """bcrypt wrapper bound to a work factor."""

    def __init__(self, work_factor: int = DEFAULT_WORK_FACTOR):
        self.work_factor = work_factor

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self.work_factor)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Check a password against a stored bcrypt hash.

        Returns False on mismatch. A malformed stored hash raises ValueError;
        that is a data integrity problem, not a failed login.
        """
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
