"""Disclosures: the salted pre-images of selectively disclosable claims.

An object-property disclosure is the JSON array ``[salt, claim_name,
claim_value]``; an array-element disclosure is ``[salt, claim_value]``.
The wire form is the base64url encoding of the UTF-8 bytes of that array,
and the digest referenced from the encoded document is computed over the
wire form, not over the JSON.
"""

from typing import Any, Optional

from . import json_utils
from .constants import DEFAULT_HASH_ALGORITHM, KEY_THREE_DOTS, is_reserved_key
from .digest import digest_b64, resolve_hash_algorithm
from .errors import MalformedDisclosure, NotArrayDisclosure, ReservedKey
from .salts import RandomSource, generate_salt


class Disclosure:
    """An immutable disclosure of one object property or one array element."""

    __slots__ = ("_salt", "_claim_name", "_claim_value", "_json", "_disclosure", "_digests")

    def __init__(
        self,
        salt: str,
        claim_name: Optional[str],
        claim_value: Any,
        *,
        _json: Optional[str] = None,
        _disclosure: Optional[str] = None,
    ):
        """Create a disclosure from its salt, optional claim name and value.

        Args:
            salt: base64url salt string
            claim_name: Claim name, or None for an array element
            claim_value: Any JSON value

        Raises:
            TypeError: If salt or claim_name have the wrong type, or the value
                is not JSON serializable
            ReservedKey: If the claim name is a reserved key
            ValueError: If the value contains NaN or an infinite float
        """
        if not isinstance(salt, str):
            raise TypeError("'salt' must be a string")

        if claim_name is not None:
            if not isinstance(claim_name, str):
                raise TypeError("'claim_name' must be a string or None")
            if is_reserved_key(claim_name):
                raise ReservedKey(f"The claim name ('{claim_name}') is a reserved key.")

        if _json is None:
            if claim_name is None:
                _json = json_utils.encode([salt, claim_value])
            else:
                _json = json_utils.encode([salt, claim_name, claim_value])

        if _disclosure is None:
            _disclosure = json_utils.b64url_encode(json_utils.to_utf8(_json))

        self._salt = salt
        self._claim_name = claim_name
        self._claim_value = claim_value
        self._json = _json
        self._disclosure = _disclosure
        self._digests: dict[str, str] = {}

    @classmethod
    def new(
        cls,
        claim_name: Optional[str],
        claim_value: Any,
        random_source: Optional[RandomSource] = None,
    ) -> "Disclosure":
        """Create a disclosure with a freshly generated 128-bit salt."""
        salt = json_utils.b64url_encode(generate_salt(random_source=random_source))
        return cls(salt, claim_name, claim_value)

    @classmethod
    def for_array_element(
        cls, claim_value: Any, random_source: Optional[RandomSource] = None
    ) -> "Disclosure":
        """Create an array-element disclosure with a freshly generated salt."""
        return cls.new(None, claim_value, random_source)

    @classmethod
    def parse(cls, disclosure: str) -> "Disclosure":
        """Parse the wire form of a disclosure.

        Whitespace inside the JSON array is accepted; the original string is
        kept as the wire form so that the digest matches the issuer's.

        Args:
            disclosure: base64url-encoded disclosure

        Returns:
            The parsed disclosure

        Raises:
            MalformedDisclosure: If the string is not a valid disclosure
        """
        if not isinstance(disclosure, str):
            raise MalformedDisclosure("A disclosure must be a string.")

        try:
            raw = json_utils.b64url_decode(disclosure)
        except ValueError as e:
            raise MalformedDisclosure("The disclosure is not valid base64url.") from e

        try:
            text = json_utils.from_utf8(raw)
        except UnicodeDecodeError as e:
            raise MalformedDisclosure("The disclosure is not valid UTF-8.") from e

        try:
            elements = json_utils.decode(text)
        except json_utils.JSONDecodeError as e:
            raise MalformedDisclosure("The disclosure is not valid JSON.") from e

        if not json_utils.is_array(elements) or len(elements) not in (2, 3):
            raise MalformedDisclosure("Not a JSON array having 2 or 3 elements.")

        salt = elements[0]
        if not isinstance(salt, str):
            raise MalformedDisclosure("The first element (salt) is not a string.")

        if len(elements) == 2:
            claim_name = None
            claim_value = elements[1]
        else:
            claim_name = elements[1]
            claim_value = elements[2]
            if not isinstance(claim_name, str):
                raise MalformedDisclosure("The second element (claim name) is not a string.")
            if is_reserved_key(claim_name):
                raise MalformedDisclosure(f"The claim name ('{claim_name}') is a reserved key.")

        return cls(salt, claim_name, claim_value, _json=text, _disclosure=disclosure)

    @property
    def salt(self) -> str:
        return self._salt

    @property
    def claim_name(self) -> Optional[str]:
        """Claim name, or None for an array-element disclosure."""
        return self._claim_name

    @property
    def claim_value(self) -> Any:
        return self._claim_value

    @property
    def canonical_json(self) -> str:
        """The JSON array this disclosure was built from."""
        return self._json

    @property
    def wire_form(self) -> str:
        """base64url(UTF-8(canonical_json))."""
        return self._disclosure

    @property
    def is_array_element(self) -> bool:
        return self._claim_name is None

    def digest(self, hash_alg: str = DEFAULT_HASH_ALGORITHM) -> str:
        """Compute the base64url digest of the wire form.

        Args:
            hash_alg: Hash algorithm name (default "sha-256")

        Returns:
            base64url-encoded digest

        Raises:
            UnsupportedAlgorithm: If the algorithm is not available
        """
        key = resolve_hash_algorithm(hash_alg)
        cached = self._digests.get(key)
        if cached is None:
            cached = digest_b64(hash_alg, self._disclosure)
            self._digests[key] = cached
        return cached

    def to_array_element(self, hash_alg: str = DEFAULT_HASH_ALGORITHM) -> dict[str, str]:
        """Build the ``{"...": digest}`` element that hides this array element.

        Raises:
            NotArrayDisclosure: If this disclosure has a claim name
        """
        if self._claim_name is not None:
            raise NotArrayDisclosure(
                f"The disclosure of '{self._claim_name}' is for an object property, "
                "not for an array element."
            )
        return {KEY_THREE_DOTS: self.digest(hash_alg)}

    def __str__(self) -> str:
        return self._disclosure

    def __repr__(self) -> str:
        return f"Disclosure({self._disclosure!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Disclosure):
            return NotImplemented
        return self._disclosure == other._disclosure

    def __hash__(self) -> int:
        return hash((Disclosure, self._disclosure))
