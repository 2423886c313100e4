"""Digest primitive: hash a byte string and base64url-encode the result."""

import hashlib
from typing import Optional

from . import json_utils
from .constants import DECOY_ENTROPY, DEFAULT_HASH_ALGORITHM
from .errors import UnsupportedAlgorithm
from .salts import RandomSource, generate_salt


def resolve_hash_algorithm(hash_alg: str) -> str:
    """Map a hash algorithm name onto the name used by hashlib.

    Names are matched case-insensitively, so "SHA-256", "sha-256" and
    "sha256" all resolve to "sha256". "sha3-256" resolves to "sha3_256" and
    "sha-512/256" to "sha512_256".

    Args:
        hash_alg: Hash algorithm name, e.g. "sha-256"

    Returns:
        Name accepted by hashlib.new()

    Raises:
        UnsupportedAlgorithm: If no fixed-length algorithm matches the name
    """
    if not isinstance(hash_alg, str) or not hash_alg:
        raise UnsupportedAlgorithm(f"Unsupported hash algorithm: {hash_alg!r}")

    name = hash_alg.lower()
    candidates = (
        name,
        name.replace("-", "").replace("/", "_"),
        name.replace("-", "_").replace("/", "_"),
    )

    for candidate in candidates:
        # SHAKE digests need an explicit output length
        if candidate.startswith("shake"):
            break
        if candidate in hashlib.algorithms_available:
            return candidate

    raise UnsupportedAlgorithm(f"Unsupported hash algorithm: {hash_alg}")


def digest(hash_alg: str, data: bytes) -> bytes:
    """Hash bytes with the named algorithm.

    Args:
        hash_alg: Hash algorithm name
        data: Input bytes

    Returns:
        Hash digest bytes

    Raises:
        UnsupportedAlgorithm: If the algorithm is not available
    """
    name = resolve_hash_algorithm(hash_alg)
    try:
        hasher = hashlib.new(name)
    except ValueError as e:
        raise UnsupportedAlgorithm(f"Unsupported hash algorithm: {hash_alg}") from e
    hasher.update(data)
    return hasher.digest()


def digest_b64(hash_alg: str, text: str) -> str:
    """Hash the UTF-8 encoding of a string and base64url-encode the digest."""
    return json_utils.b64url_encode(digest(hash_alg, json_utils.to_utf8(text)))


def random_digest(
    hash_alg: Optional[str] = None, random_source: Optional[RandomSource] = None
) -> str:
    """Generate a decoy digest from fresh random bytes.

    Args:
        hash_alg: Hash algorithm name (default "sha-256")
        random_source: Optional RandomSource (uses the secure default if None)

    Returns:
        base64url digest of DECOY_ENTROPY random bytes
    """
    data = generate_salt(DECOY_ENTROPY, random_source)
    return json_utils.b64url_encode(digest(hash_alg or DEFAULT_HASH_ALGORITHM, data))
