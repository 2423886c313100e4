"""Random sources for salts, decoy digests and decoy placement."""

import random
import secrets
from typing import Optional, Protocol

from .constants import SALT_LENGTH


class RandomSource(Protocol):
    """Protocol for the randomness consumed by disclosures and the encoder."""

    def generate_salt(self, length: int = SALT_LENGTH) -> bytes:
        """Generate random bytes.

        Args:
            length: Number of bytes (default 16 for 128 bits)

        Returns:
            Random bytes
        """

    def uniform(self, a: float, b: float) -> float:
        """Return a random float N such that a <= N <= b."""

    def randbelow(self, n: int) -> int:
        """Return a random int in the range [0, n)."""


class SecureRandomSource:
    """Cryptographically secure random source using the secrets module."""

    def __init__(self) -> None:
        self._random = random.SystemRandom()

    def generate_salt(self, length: int = SALT_LENGTH) -> bytes:
        """Generate cryptographically secure random bytes.

        Args:
            length: Number of bytes (default 16 for 128 bits)

        Returns:
            Cryptographically secure random bytes
        """
        return secrets.token_bytes(length)

    def uniform(self, a: float, b: float) -> float:
        """Return a float N with a <= N <= b from the system random source."""
        return self._random.uniform(a, b)

    def randbelow(self, n: int) -> int:
        """Return a cryptographically secure int in the range [0, n)."""
        return secrets.randbelow(n)


class SeededRandomSource:
    """Deterministic random source for testing purposes.

    WARNING: This source is NOT cryptographically secure and should
    only be used for testing and reproducible examples.
    """

    def __init__(self, seed: int = 42):
        """Initialize with a seed value.

        Args:
            seed: Integer seed for deterministic output
        """
        self._random = random.Random(seed)

    def generate_salt(self, length: int = SALT_LENGTH) -> bytes:
        """Generate deterministic bytes based on the seed.

        Args:
            length: Number of bytes (default 16 for 128 bits)

        Returns:
            Deterministic bytes (NOT cryptographically secure)
        """
        return bytes(self._random.getrandbits(8) for _ in range(length))

    def uniform(self, a: float, b: float) -> float:
        """Return a deterministic float N such that a <= N <= b."""
        return self._random.uniform(a, b)

    def randbelow(self, n: int) -> int:
        """Return a deterministic int in the range [0, n)."""
        return self._random.randrange(n)


# Default secure random source instance
_default_random_source = SecureRandomSource()


def default_random_source() -> RandomSource:
    """Return the shared secure random source."""
    return _default_random_source


def generate_salt(
    length: int = SALT_LENGTH, random_source: Optional[RandomSource] = None
) -> bytes:
    """Generate cryptographically secure random bytes.

    Args:
        length: Number of bytes (default 16 for 128 bits)
        random_source: Optional custom source (uses secure default if None)

    Returns:
        Random bytes
    """
    if random_source is None:
        random_source = _default_random_source
    return random_source.generate_salt(length)
