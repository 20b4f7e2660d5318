"""UUID generation utilities.

This module centralizes identifier generation. Account ids are assigned by
the store through generate_uuid(); nothing else should import uuid4.
"""

from uuid import uuid4


def generate_uuid() -> str:
    """Generate a random UUID v4 as a string."""
    return str(uuid4())
