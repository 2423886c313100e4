"""Recursive decoder that restores the disclosed part of an encoded document.

Digests without a matching disclosure are skipped silently: they are either
decoys or claims the holder chose not to reveal, and the decoder must not
tell the two apart.
"""

import logging
from typing import Any, Iterable, Optional, Union

from .constants import (
    DEFAULT_HASH_ALGORITHM,
    DEFAULT_MAX_DEPTH,
    KEY_SD,
    KEY_SD_ALG,
    KEY_THREE_DOTS,
)
from .disclosure import Disclosure
from .errors import (
    ArrayDisclosureInObjectContext,
    InvalidEncodedObject,
    MalformedArrayMarker,
    NestingTooDeep,
    ObjectDisclosureInArrayContext,
)

logger = logging.getLogger(__name__)

DigestMap = dict[str, Disclosure]


def determine_hash_algorithm(encoded: dict[str, Any], default: Optional[str] = None) -> str:
    """Read the hash algorithm from '_sd_alg', falling back to the default.

    Raises:
        InvalidEncodedObject: If '_sd_alg' is present but not a string
    """
    if KEY_SD_ALG not in encoded:
        return default or DEFAULT_HASH_ALGORITHM

    alg = encoded[KEY_SD_ALG]
    if not isinstance(alg, str):
        raise InvalidEncodedObject("The value of '_sd_alg' is not a string.")
    return alg


def create_digest_map(
    hash_alg: str, disclosures: Optional[Iterable[Disclosure]]
) -> DigestMap:
    """Index disclosures by their digest computed with the given algorithm."""
    digest_map: DigestMap = {}
    if disclosures is None:
        return digest_map

    for disclosure in disclosures:
        if disclosure is None:
            continue
        digest_map[disclosure.digest(hash_alg)] = disclosure

    return digest_map


class SDObjectDecoder:
    """Decode an encoded object or array against a set of disclosures.

    A decoder tracks the disclosures consumed by the current ``decode()``
    call and must not be shared between concurrent decodings.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        """Initialize the decoder.

        Args:
            max_depth: Maximum nesting depth of the encoded document
        """
        self.max_depth = max_depth
        self._consumed: set[str] = set()

    def decode(
        self,
        encoded: Union[dict[str, Any], list[Any]],
        disclosures: Optional[Iterable[Disclosure]] = None,
        hash_alg: Optional[str] = None,
    ) -> Union[dict[str, Any], list[Any]]:
        """Decode an encoded document.

        For an object, the hash algorithm is taken from its '_sd_alg' key
        when present; otherwise ``hash_alg`` or the default is used. The
        whole tree is decoded against that one algorithm.

        Args:
            encoded: Encoded JSON object (dict) or array (list)
            disclosures: Disclosures to reveal (None means none)
            hash_alg: Hash algorithm when the document does not declare one

        Returns:
            The document with every disclosed claim restored and every
            undisclosed claim or element removed

        Raises:
            TypeError: If the document is neither a dict nor a list
            InvalidEncodedObject: If reserved keys hold invalid values or
                the digest of a disclosure is referenced more than once
            ArrayDisclosureInObjectContext: If '_sd' references an array element
            ObjectDisclosureInArrayContext: If '...' references an object property
            NestingTooDeep: If the document is nested deeper than max_depth
        """
        if isinstance(encoded, dict):
            hash_alg = determine_hash_algorithm(encoded, hash_alg)
        elif isinstance(encoded, list):
            hash_alg = hash_alg or DEFAULT_HASH_ALGORITHM
        else:
            raise TypeError("Only a JSON object or a JSON array can be decoded")

        digest_map = create_digest_map(hash_alg, disclosures)
        self._consumed = set()
        logger.debug("Decoding with %d disclosures using %s", len(digest_map), hash_alg)

        return self._decode_value(digest_map, encoded, 0)

    def _check_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            raise NestingTooDeep(f"Document is nested deeper than {self.max_depth} levels")

    def _find_disclosure(self, digest_map: DigestMap, digest: str) -> Optional[Disclosure]:
        disclosure = digest_map.get(digest)
        if disclosure is None:
            return None

        # Each disclosure is consumed once, so decoding stays linear in the input
        if digest in self._consumed:
            raise InvalidEncodedObject(
                f"The digest '{digest}' of a disclosure is referenced more than once."
            )
        self._consumed.add(digest)
        return disclosure

    def _decode_value(self, digest_map: DigestMap, value: Any, depth: int) -> Any:
        if isinstance(value, dict):
            return self._decode_object(digest_map, value, depth)
        if isinstance(value, list):
            return self._decode_array(digest_map, value, depth)
        return value

    def _decode_object(
        self, digest_map: DigestMap, encoded: dict[str, Any], depth: int
    ) -> dict[str, Any]:
        self._check_depth(depth)
        decoded: dict[str, Any] = {}

        for key, value in encoded.items():
            if key in (KEY_SD, KEY_SD_ALG):
                continue
            decoded[key] = self._decode_value(digest_map, value, depth + 1)

        # Disclosed claims win over plain claims of the same name
        if KEY_SD in encoded:
            self._decode_sd(digest_map, encoded[KEY_SD], decoded, depth)

        return decoded

    def _decode_sd(
        self, digest_map: DigestMap, sd: Any, decoded: dict[str, Any], depth: int
    ) -> None:
        if sd is None:
            return
        if not isinstance(sd, list):
            raise InvalidEncodedObject("The value of '_sd' is not an array.")

        for digest in sd:
            if digest is None:
                continue
            if not isinstance(digest, str):
                raise InvalidEncodedObject("An element in the '_sd' array is not a string.")

            disclosure = self._find_disclosure(digest_map, digest)
            if disclosure is None:
                # Undisclosed claim or decoy
                continue

            if disclosure.claim_name is None:
                raise ArrayDisclosureInObjectContext(
                    "The digest of a disclosure for an array element is found in the '_sd' array."
                )

            decoded[disclosure.claim_name] = self._decode_value(
                digest_map, disclosure.claim_value, depth + 1
            )

    def _decode_array(self, digest_map: DigestMap, encoded: list[Any], depth: int) -> list[Any]:
        self._check_depth(depth)
        decoded: list[Any] = []

        for element in encoded:
            if isinstance(element, dict) and KEY_THREE_DOTS in element:
                self._decode_array_marker(digest_map, element, decoded, depth)
            else:
                decoded.append(self._decode_value(digest_map, element, depth + 1))

        return decoded

    def _decode_array_marker(
        self, digest_map: DigestMap, element: dict[str, Any], decoded: list[Any], depth: int
    ) -> None:
        if len(element) != 1:
            raise MalformedArrayMarker(
                "An object containing the three-dot key ('...') must not contain other keys."
            )

        digest = element[KEY_THREE_DOTS]
        if digest is None:
            return
        if not isinstance(digest, str):
            raise MalformedArrayMarker("The value of the three-dot key ('...') is not a string.")

        disclosure = self._find_disclosure(digest_map, digest)
        if disclosure is None:
            # Undisclosed element or decoy; the array shrinks
            return

        if disclosure.claim_name is not None:
            raise ObjectDisclosureInArrayContext(
                "The digest of a disclosure for an object property is specified by '...'."
            )

        decoded.append(self._decode_value(digest_map, disclosure.claim_value, depth + 1))
