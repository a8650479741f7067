"""Identifier generator for menus and roles.

IDs have the form ``<PREFIX><unix-seconds><8 hex chars>``, for example
``ROL1718000000A1B2C3D4``.
"""

import re
import secrets
import time


class IdGenerator:
    """Generator for prefixed, time-ordered identifiers."""

    MENU_PREFIX = "MNU"
    ROLE_PREFIX = "ROL"

    PATTERN = re.compile(r"^[A-Z]{3}\d+[0-9A-F]{8}$")

    @classmethod
    def generate(cls, prefix: str) -> str:
        """Generate an identifier with the given prefix.

        Args:
            prefix: Three-letter uppercase prefix.

        Returns:
            A new identifier string.
        """
        return f"{prefix}{int(time.time())}{secrets.token_hex(4).upper()}"

    @classmethod
    def menu_id(cls) -> str:
        return cls.generate(cls.MENU_PREFIX)

    @classmethod
    def role_id(cls) -> str:
        return cls.generate(cls.ROLE_PREFIX)

    @classmethod
    def validate(cls, value: str) -> bool:
        """Check whether a value looks like a generated identifier."""
        if not isinstance(value, str):
            return False
        return bool(cls.PATTERN.match(value))
