"""
Short code generation strategies.
Uses Strategy Pattern so the allocator can be driven by any code source
(tests inject deterministic codes to force collisions).
"""

import string
import secrets
from abc import ABC, abstractmethod


BASE62_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    @abstractmethod
    def generate(self) -> str:
        """
        Draw a candidate short code.

        Uniqueness is NOT checked here: the store rejects duplicates at
        insert time and the allocator draws again.

        Returns:
            A candidate short code string
        """
        pass


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Random fixed-length codes over the 62-character alphanumeric alphabet.

    Uses the secrets module (CSPRNG). With 8 characters there are 62^8
    (about 2.2e14) codes, so collisions are rare but still possible.
    """

    def __init__(self, length: int = 8):
        if length < 1:
            raise ValueError("Short code length must be positive")
        self.length = length
        self.characters = BASE62_ALPHABET

    def generate(self) -> str:
        """Generate a random code of the configured length"""
        return ''.join(secrets.choice(self.characters) for _ in range(self.length))
