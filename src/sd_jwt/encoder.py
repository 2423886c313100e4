"""Recursive encoder that makes every scalar of a JSON document selectively disclosable.

Walks the document and, at each level:

- keeps retained top-level claims as they are,
- recursively encodes nested objects and arrays in place,
- hides scalar object properties behind digests in the level's '_sd' list,
- replaces scalar array elements with ``{"...": digest}`` markers,
- adds decoy digests in proportion to the size of the level.
"""

import logging
import math
from typing import Any, Iterable, Optional, Union

from .constants import (
    DECOY_MAGNIFICATION_MAX_DEFAULT,
    DECOY_MAGNIFICATION_MAX_LIMIT,
    DECOY_MAGNIFICATION_MIN_DEFAULT,
    DECOY_MAGNIFICATION_MIN_LIMIT,
    DEFAULT_HASH_ALGORITHM,
    DEFAULT_MAX_DEPTH,
    KEY_THREE_DOTS,
    RETAINED_CLAIMS,
    is_reserved_key,
)
from .digest import random_digest
from .disclosure import Disclosure
from .errors import NestingTooDeep, ReservedKey
from .object_builder import SDObjectBuilder
from .salts import RandomSource, default_random_source

logger = logging.getLogger(__name__)


def _clamp_magnification(value: float) -> float:
    return max(DECOY_MAGNIFICATION_MIN_LIMIT, min(value, DECOY_MAGNIFICATION_MAX_LIMIT))


class SDObjectEncoder:
    """Encode a JSON object or array into its selectively disclosable form.

    An encoder accumulates the disclosures of the last ``encode()`` call and
    must not be shared between concurrent encodings.
    """

    def __init__(
        self,
        hash_alg: Optional[str] = None,
        decoy_magnification_min: float = DECOY_MAGNIFICATION_MIN_DEFAULT,
        decoy_magnification_max: float = DECOY_MAGNIFICATION_MAX_DEFAULT,
        include_hash_algorithm: bool = False,
        retained_claims: Optional[Iterable[str]] = None,
        random_source: Optional[RandomSource] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """Initialize the encoder.

        Args:
            hash_alg: Hash algorithm for digests (default "sha-256")
            decoy_magnification_min: Lower bound of the decoy ratio per level
            decoy_magnification_max: Upper bound of the decoy ratio per level;
                set both bounds to 0 to disable decoys
            include_hash_algorithm: Whether to put '_sd_alg' in the top-level object
            retained_claims: Top-level claims that are never made selectively
                disclosable (defaults to RETAINED_CLAIMS)
            random_source: Optional random source for salts and decoys
            max_depth: Maximum nesting depth of the input document

        Raises:
            ValueError: If decoy_magnification_min > decoy_magnification_max
        """
        self.hash_alg = hash_alg or DEFAULT_HASH_ALGORITHM
        self.set_decoy_magnification(decoy_magnification_min, decoy_magnification_max)
        self.include_hash_algorithm = include_hash_algorithm
        self.retained_claims: set[str] = set(
            RETAINED_CLAIMS if retained_claims is None else retained_claims
        )
        self.random_source = random_source or default_random_source()
        self.max_depth = max_depth
        self._disclosures: list[Disclosure] = []

    def set_hash_algorithm(self, hash_alg: Optional[str]) -> "SDObjectEncoder":
        self.hash_alg = hash_alg or DEFAULT_HASH_ALGORITHM
        return self

    def set_decoy_magnification(self, min_value: float, max_value: float) -> "SDObjectEncoder":
        """Set the range of the decoy ratio, clamped into [0, 10]."""
        if min_value > max_value:
            raise ValueError("decoy_magnification_min > decoy_magnification_max")
        self.decoy_magnification_min = _clamp_magnification(min_value)
        self.decoy_magnification_max = _clamp_magnification(max_value)
        return self

    def set_include_hash_algorithm(self, included: bool) -> "SDObjectEncoder":
        self.include_hash_algorithm = included
        return self

    @property
    def disclosures(self) -> list[Disclosure]:
        """Disclosures created by the last ``encode()`` call, depth first."""
        return self._disclosures

    def encode(
        self, document: Union[dict[str, Any], list[Any]]
    ) -> Union[dict[str, Any], list[Any]]:
        """Encode a document.

        Args:
            document: A JSON object (dict) or array (list)

        Returns:
            The encoded document; the created disclosures are available
            through the ``disclosures`` property

        Raises:
            TypeError: If the document is neither a dict nor a list
            ReservedKey: If the document uses a reserved key as a claim name,
                including anywhere inside a retained claim
            NestingTooDeep: If the document is nested deeper than max_depth
        """
        self._disclosures = []

        if isinstance(document, dict):
            encoded: Union[dict[str, Any], list[Any]] = self._encode_object(document, 0, top=True)
        elif isinstance(document, list):
            encoded = self._encode_array(document, 0)
        else:
            raise TypeError("Only a JSON object or a JSON array can be encoded")

        logger.debug(
            "Encoded document with %d disclosures using %s",
            len(self._disclosures),
            self.hash_alg,
        )
        return encoded

    def _check_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            raise NestingTooDeep(f"Document is nested deeper than {self.max_depth} levels")

    def _check_retained(self, value: Any, depth: int) -> None:
        # Retained values stay plain but must not look like encoded content
        if isinstance(value, dict):
            self._check_depth(depth)
            for key, item in value.items():
                if is_reserved_key(key):
                    raise ReservedKey(f"The key ('{key}') in a retained claim is a reserved key.")
                self._check_retained(item, depth + 1)
        elif isinstance(value, list):
            self._check_depth(depth)
            for item in value:
                self._check_retained(item, depth + 1)

    def _encode_value(self, value: Any, depth: int) -> Any:
        if isinstance(value, dict):
            return self._encode_object(value, depth)
        return self._encode_array(value, depth)

    def _encode_object(self, obj: dict[str, Any], depth: int, top: bool = False) -> dict[str, Any]:
        self._check_depth(depth)
        builder = SDObjectBuilder(self.hash_alg, self.random_source)

        for key, value in obj.items():
            if top and key in self.retained_claims:
                self._check_retained(value, depth + 1)
                builder.put_claim(key, value)
            elif isinstance(value, (dict, list)):
                builder.put_claim(key, self._encode_value(value, depth + 1))
            else:
                disclosure = builder.put_new_sd_claim(key, value)
                self._disclosures.append(disclosure)

        decoy_count = self._compute_decoy_count(len(obj))
        builder.put_decoy_digests(decoy_count)

        return builder.build(top and self.include_hash_algorithm)

    def _encode_array(self, array: list[Any], depth: int) -> list[Any]:
        self._check_depth(depth)
        decoy_count = self._compute_decoy_count(len(array))
        encoded: list[Any] = []

        for value in array:
            if isinstance(value, (dict, list)):
                encoded.append(self._encode_value(value, depth + 1))
            else:
                disclosure = Disclosure.for_array_element(value, self.random_source)
                self._disclosures.append(disclosure)
                encoded.append(disclosure.to_array_element(self.hash_alg))

        # Each decoy goes to an independent random position, never just the end
        for _ in range(decoy_count):
            index = self.random_source.randbelow(len(encoded) + 1)
            encoded.insert(index, self._generate_decoy_element())

        return encoded

    def _compute_decoy_count(self, base_count: int) -> int:
        min_value = self.decoy_magnification_min
        max_value = self.decoy_magnification_max

        if min_value == max_value:
            ratio = min_value
        else:
            ratio = self.random_source.uniform(min_value, max_value)

        # Round half up
        return int(math.floor(base_count * ratio + 0.5))

    def _generate_decoy_element(self) -> dict[str, str]:
        return {KEY_THREE_DOTS: random_digest(self.hash_alg, self.random_source)}
