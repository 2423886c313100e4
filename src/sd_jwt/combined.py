"""Combined document codec: a carrier, its disclosures and an optional binding document.

Current format::

    <carrier>~<disclosure 1>~...~<disclosure N>~[<binding document>]

The trailing delimiter is always present; a non-empty final segment is the
holder-binding document. The legacy "Combined Format" (issuance without a
trailing delimiter, presentation with one) is supported through
``CombinedFormat``, ``Issuance`` and ``Presentation``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from .carrier import hash_algorithm_of
from .constants import DELIMITER
from .digest import digest_b64
from .disclosure import Disclosure
from .errors import MalformedCombinedDocument, MalformedDisclosure

logger = logging.getLogger(__name__)


def _normalize_disclosures(disclosures: Optional[Iterable[Disclosure]]) -> tuple[Disclosure, ...]:
    if disclosures is None:
        return ()
    return tuple(d for d in disclosures if d is not None)


def _parse_disclosures(segments: Iterable[str]) -> list[Disclosure]:
    try:
        return [Disclosure.parse(segment) for segment in segments]
    except MalformedDisclosure as e:
        raise MalformedCombinedDocument(f"Failed to parse disclosures: {e}") from e


def serialize(
    carrier: str,
    disclosures: Iterable[Disclosure],
    binding: Optional[str] = None,
) -> str:
    """Join a carrier, disclosures and an optional binding document.

    Returns:
        ``carrier~d1~...~dN~`` followed by the binding document, if any
    """
    segments = [carrier]
    segments.extend(d.wire_form for d in disclosures)
    segments.append(binding if binding is not None else "")
    return DELIMITER.join(segments)


def compute_sd_hash(
    carrier: str,
    disclosures: Iterable[Disclosure],
    hash_alg: Optional[str] = None,
) -> str:
    """Compute the binding digest over ``carrier~d1~...~dN~``.

    The binding document is never part of the hashed input.

    Args:
        carrier: The carrier document
        disclosures: The disclosures being presented
        hash_alg: Hash algorithm; read from the carrier's '_sd_alg' if None

    Returns:
        base64url digest
    """
    if hash_alg is None:
        hash_alg = hash_algorithm_of(carrier)
    return digest_b64(hash_alg, serialize(carrier, disclosures, None))


class CombinedDocument:
    """An immutable carrier with its disclosures and optional binding document."""

    def __init__(
        self,
        carrier: str,
        disclosures: Optional[Iterable[Disclosure]] = None,
        binding: Optional[str] = None,
    ):
        """Initialize a combined document.

        Args:
            carrier: The signed carrier document (compact token)
            disclosures: Disclosures to include, in order
            binding: Optional holder-binding document

        Raises:
            TypeError: If the carrier is not a string
        """
        if not isinstance(carrier, str):
            raise TypeError("'carrier' must be a string")

        self._carrier = carrier
        self._disclosures = _normalize_disclosures(disclosures)
        self._binding = binding or None
        self._serialized = serialize(carrier, self._disclosures, self._binding)

    @property
    def carrier(self) -> str:
        return self._carrier

    @property
    def disclosures(self) -> tuple[Disclosure, ...]:
        return self._disclosures

    @property
    def binding(self) -> Optional[str]:
        return self._binding

    def serialize(self) -> str:
        return self._serialized

    @property
    def hash_algorithm(self) -> str:
        """The carrier's '_sd_alg', or the default algorithm."""
        return hash_algorithm_of(self._carrier)

    @property
    def sd_hash(self) -> str:
        """Binding digest over the carrier and disclosures, excluding the binding."""
        return compute_sd_hash(self._carrier, self._disclosures)

    def with_binding(self, binding: Optional[str]) -> "CombinedDocument":
        """Return a copy with the binding document replaced."""
        return CombinedDocument(self._carrier, self._disclosures, binding)

    @classmethod
    def parse(cls, input_string: str) -> "CombinedDocument":
        """Parse a combined document.

        Args:
            input_string: ``carrier~d1~...~dN~[binding]``

        Returns:
            The parsed document

        Raises:
            MalformedCombinedDocument: If the string is malformed or a
                disclosure cannot be parsed
        """
        if not isinstance(input_string, str):
            raise MalformedCombinedDocument("A combined document must be a string.")

        segments = input_string.split(DELIMITER)
        last_index = len(segments) - 1

        if len(segments) < 2:
            raise MalformedCombinedDocument("The combined document is malformed.")

        if any(not segment for segment in segments[:last_index]):
            raise MalformedCombinedDocument("The combined document is malformed.")

        binding = None if input_string.endswith(DELIMITER) else segments[last_index]
        disclosures = _parse_disclosures(segments[1:last_index])

        logger.debug(
            "Parsed combined document with %d disclosures (binding: %s)",
            len(disclosures),
            binding is not None,
        )
        return cls(segments[0], disclosures, binding)

    def __str__(self) -> str:
        return self._serialized

    def __repr__(self) -> str:
        return f"CombinedDocument({self._serialized!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CombinedDocument):
            return NotImplemented
        return self._serialized == other._serialized

    def __hash__(self) -> int:
        return hash((CombinedDocument, self._serialized))


class CombinedFormat(ABC):
    """Base class of the legacy issuance and presentation formats."""

    def __init__(self, carrier: str, disclosures: Optional[Iterable[Disclosure]] = None):
        if not isinstance(carrier, str):
            raise TypeError("'carrier' must be a string")

        self._carrier = carrier
        self._disclosures = _normalize_disclosures(disclosures)

    @property
    def carrier(self) -> str:
        return self._carrier

    @property
    def disclosures(self) -> tuple[Disclosure, ...]:
        return self._disclosures

    @property
    def is_issuance(self) -> bool:
        return isinstance(self, Issuance)

    @property
    def is_presentation(self) -> bool:
        return isinstance(self, Presentation)

    @abstractmethod
    def serialize(self) -> str:
        """Return the serialized form of this combined format."""

    def __str__(self) -> str:
        return self.serialize()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CombinedFormat):
            return NotImplemented
        return type(self) is type(other) and self.serialize() == other.serialize()

    def __hash__(self) -> int:
        return hash((type(self), self.serialize()))

    @staticmethod
    def parse(input_string: str) -> "CombinedFormat":
        return parse_combined_format(input_string)


class Issuance(CombinedFormat):
    """Legacy issuance: ``carrier~d1~...~dN`` with no trailing delimiter."""

    def __init__(self, carrier: str, disclosures: Optional[Iterable[Disclosure]] = None):
        super().__init__(carrier, disclosures)
        self._serialized = DELIMITER.join(
            [carrier, *(d.wire_form for d in self._disclosures)]
        )

    def serialize(self) -> str:
        return self._serialized


class Presentation(CombinedFormat):
    """Legacy presentation: ``carrier~d1~...~dM~[binding]``."""

    def __init__(
        self,
        carrier: str,
        disclosures: Optional[Iterable[Disclosure]] = None,
        binding: Optional[str] = None,
    ):
        super().__init__(carrier, disclosures)
        self._binding = binding or None
        self._serialized = serialize(carrier, self._disclosures, self._binding)

    @property
    def binding(self) -> Optional[str]:
        return self._binding

    def serialize(self) -> str:
        return self._serialized


def parse_combined_format(input_string: str) -> CombinedFormat:
    """Parse the legacy combined format.

    Empty segments are discarded. A trailing delimiter marks a presentation
    without a binding document. Otherwise the final segment is taken as a
    binding document, and the input as a presentation, iff it contains a
    '.'; anything else is an issuance.

    Raises:
        MalformedCombinedDocument: If there is no carrier or a disclosure
            cannot be parsed
    """
    if not isinstance(input_string, str):
        raise MalformedCombinedDocument("A combined format must be a string.")

    segments = input_string.split(DELIMITER)
    while segments and not segments[-1]:
        segments.pop()

    if not segments or not segments[0]:
        raise MalformedCombinedDocument("The combined format is malformed.")

    carrier = segments[0]
    ends_with_delimiter = input_string.endswith(DELIMITER)

    if len(segments) == 1:
        if ends_with_delimiter:
            return Presentation(carrier)
        return Issuance(carrier)

    last_segment = segments[-1]

    # A disclosure never contains '.', a compact token always does
    binding = last_segment if not ends_with_delimiter and "." in last_segment else None

    disclosure_segments = segments[1:-1] if binding is not None else segments[1:]
    disclosures = _parse_disclosures(s for s in disclosure_segments if s)

    if ends_with_delimiter or binding is not None:
        return Presentation(carrier, disclosures, binding)
    return Issuance(carrier, disclosures)
