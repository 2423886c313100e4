"""Compact ``header.payload.signature`` tokens with pluggable signers and verifiers.

The carrier document and the holder-binding document are both compact
tokens. This module assembles and reads them; the signature algorithms
themselves are supplied by the caller through the Signer and Verifier
protocols, allowing keys to be managed externally.
"""

from typing import Any, Optional, Protocol

from . import json_utils
from .constants import DEFAULT_HASH_ALGORITHM, KEY_SD_ALG
from .errors import MalformedCarrier


class Signer(Protocol):
    """Protocol for compact token signers."""

    def sign(self, message: bytes) -> bytes:
        """Sign a message and return the signature.

        Args:
            message: The signing input (``header.payload`` as ASCII bytes)

        Returns:
            The signature bytes
        """

    @property
    def algorithm(self) -> str:
        """Get the JWS algorithm name (e.g., "ES256")."""


class Verifier(Protocol):
    """Protocol for compact token verifiers."""

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify a signature on a message.

        Args:
            message: The message that was signed
            signature: The signature to verify

        Returns:
            True if signature is valid, False otherwise
        """


def split_compact(token: str) -> tuple[str, str, str]:
    """Split a compact token into its three segments.

    Raises:
        MalformedCarrier: If the token does not have exactly three segments
    """
    if not isinstance(token, str):
        raise MalformedCarrier("A compact token must be a string")

    segments = token.split(".")
    if len(segments) != 3:
        raise MalformedCarrier("A compact token must have exactly three segments")

    header, payload, signature = segments
    return header, payload, signature


def _decode_segment(segment: str, name: str) -> dict[str, Any]:
    try:
        value = json_utils.decode(json_utils.from_utf8(json_utils.b64url_decode(segment)))
    except (ValueError, UnicodeDecodeError) as e:
        # JSONDecodeError is a ValueError
        raise MalformedCarrier(f"The {name} is not base64url-encoded JSON") from e

    if not json_utils.is_object(value):
        raise MalformedCarrier(f"The {name} is not a JSON object")
    return value


def read_header(token: str) -> dict[str, Any]:
    """Decode the header segment of a compact token."""
    header, _, _ = split_compact(token)
    return _decode_segment(header, "header")


def read_payload(token: str) -> dict[str, Any]:
    """Decode the payload segment of a compact token without verifying it."""
    _, payload, _ = split_compact(token)
    return _decode_segment(payload, "payload")


def hash_algorithm_of(token: str) -> str:
    """Return the '_sd_alg' claim of a carrier, or the default algorithm.

    Never raises: a malformed carrier or a non-string '_sd_alg' falls back
    to the default.
    """
    try:
        payload = read_payload(token)
    except MalformedCarrier:
        return DEFAULT_HASH_ALGORITHM

    alg = payload.get(KEY_SD_ALG)
    if isinstance(alg, str) and alg:
        return alg
    return DEFAULT_HASH_ALGORITHM


def sign_compact(
    payload: dict[str, Any],
    signer: Signer,
    header: Optional[dict[str, Any]] = None,
) -> str:
    """Create a signed compact token.

    Args:
        payload: JSON object to carry
        signer: A signer object that implements the sign method
        header: Header parameters; "alg" is taken from the signer if absent

    Returns:
        ``b64url(header).b64url(payload).b64url(signature)``
    """
    header = dict(header or {})
    header.setdefault("alg", signer.algorithm)

    header_b64 = json_utils.b64url_encode(json_utils.to_utf8(json_utils.encode(header)))
    payload_b64 = json_utils.b64url_encode(json_utils.to_utf8(json_utils.encode(payload)))
    signing_input = f"{header_b64}.{payload_b64}"

    signature = signer.sign(signing_input.encode("ascii"))

    return f"{signing_input}.{json_utils.b64url_encode(signature)}"


def verify_compact(token: str, verifier: Verifier) -> tuple[bool, Optional[dict[str, Any]]]:
    """Verify a compact token.

    Args:
        token: The compact token
        verifier: A verifier object that implements the verify method

    Returns:
        Tuple of (verification_result, payload if verified successfully)
    """
    try:
        header_b64, payload_b64, signature_b64 = split_compact(token)
        signature = json_utils.b64url_decode(signature_b64)
        payload = _decode_segment(payload_b64, "payload")
    except ValueError:
        # MalformedCarrier is a ValueError
        return False, None

    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    if verifier.verify(signing_input, signature):
        return True, payload
    return False, None
