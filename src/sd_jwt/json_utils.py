"""JSON and base64url utilities module.

This module provides a unified interface for the JSON and base64url
operations used by disclosures, digests and compact tokens, isolating the
underlying codec. Disclosures are hashed over their exact serialized bytes,
so every serialization choice lives here.

Currently uses the standard library json and base64 modules.
"""

import base64
import binascii
import json
import re
from typing import Any

JSONDecodeError = json.JSONDecodeError

# No insignificant whitespace, non-ASCII characters kept as UTF-8
_SEPARATORS = (",", ":")

_BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]*={0,2}$")


def encode(obj: Any) -> str:
    """Encode an object to a compact JSON string.

    Args:
        obj: The object to encode

    Returns:
        JSON text with no insignificant whitespace

    Raises:
        TypeError: If the object is not JSON serializable
        ValueError: If the object contains NaN or an infinite float
    """
    return json.dumps(obj, ensure_ascii=False, allow_nan=False, separators=_SEPARATORS)


def decode(text: str) -> Any:
    """Decode a JSON string to an object.

    Args:
        text: JSON text

    Returns:
        The decoded object

    Raises:
        JSONDecodeError: If the text is not valid JSON
    """
    return json.loads(text)


def b64url_encode(data: bytes) -> str:
    """Base64url-encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str) -> bytes:
    """Decode base64url text, with or without padding.

    Args:
        text: base64url text using the URL-safe alphabet

    Returns:
        The decoded bytes

    Raises:
        ValueError: If the text contains characters outside the URL-safe
            alphabet or has an impossible length
    """
    if not _BASE64URL_RE.match(text):
        raise ValueError("Not a base64url string")

    stripped = text.rstrip("=")
    if len(stripped) % 4 == 1:
        raise ValueError("Invalid base64url length")

    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64url string: {e}") from e


def to_utf8(text: str) -> bytes:
    """Encode text as UTF-8 bytes."""
    return text.encode("utf-8")


def from_utf8(data: bytes) -> str:
    """Strictly decode UTF-8 bytes.

    Raises:
        UnicodeDecodeError: If the bytes are not valid UTF-8
    """
    return data.decode("utf-8")


def is_object(obj: Any) -> bool:
    """Check if a decoded JSON value is an object."""
    return isinstance(obj, dict)


def is_array(obj: Any) -> bool:
    """Check if a decoded JSON value is an array."""
    return isinstance(obj, list)
