"""Opaque identifier allocation for response ids and variable names."""

import secrets
import string
from typing import Protocol

from testscript_plan.settings import MIN_IDENTIFIER_LENGTH

ALPHABET = string.ascii_letters + string.digits


class Allocator(Protocol):
    """Anything able to hand out fresh response ids and variable names."""

    def fresh_response_id(self) -> str:
        """Return a new response id."""
        ...  # pragma: no cover

    def fresh_variable_name(self) -> str:
        """Return a new variable name."""
        ...  # pragma: no cover


class IdentifierAllocator:
    """Allocator of random alphanumeric tokens.

    Tokens only need to be distinct within one plan, so no state is kept
    between calls. With the default length a collision needs roughly
    2**47 draws.
    """

    def __init__(self, length: int = 16) -> None:
        """Initialize the allocator.

        Args:
            length: Number of characters per token.

        Raises:
            ValueError: If the length is too short to avoid collisions.
        """
        if length < MIN_IDENTIFIER_LENGTH:
            raise ValueError(f'Identifier length must be at least {MIN_IDENTIFIER_LENGTH}')

        self.length = length

    def _token(self) -> str:
        return ''.join(secrets.choice(ALPHABET) for _ in range(self.length))

    def fresh_response_id(self) -> str:
        """Return a new response id."""
        return self._token()

    def fresh_variable_name(self) -> str:
        """Return a new variable name."""
        return self._token()
