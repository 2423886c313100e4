"""Builder for the digest list stored under the '_sd' key."""

from typing import Optional

from .constants import DEFAULT_HASH_ALGORITHM
from .digest import random_digest
from .disclosure import Disclosure
from .errors import ArrayDisclosureInObjectContext
from .salts import RandomSource


class DigestListBuilder:
    """Accumulate disclosure digests and decoy digests for one object level.

    There is one slot per claim name: adding a digest for a name that
    already has one replaces the earlier digest (last write wins).
    """

    def __init__(
        self,
        hash_alg: Optional[str] = None,
        random_source: Optional[RandomSource] = None,
    ):
        """Initialize the builder.

        Args:
            hash_alg: Hash algorithm for disclosure and decoy digests
            random_source: Optional random source for decoys
        """
        self.hash_alg = hash_alg or DEFAULT_HASH_ALGORITHM
        self._random_source = random_source
        self._claim_digests: dict[str, str] = {}
        self._decoy_digests: set[str] = set()

    def add(self, claim_name: str, digest: str) -> str:
        """Register a digest for a claim name, replacing any earlier one."""
        self._claim_digests[claim_name] = digest
        return digest

    def add_disclosure_digest(self, disclosure: Disclosure) -> str:
        """Compute and register the digest of an object-property disclosure.

        Returns:
            The digest computed with the builder's hash algorithm

        Raises:
            ArrayDisclosureInObjectContext: If the disclosure has no claim name
        """
        if disclosure.claim_name is None:
            raise ArrayDisclosureInObjectContext(
                "A disclosure for an array element cannot be put in an '_sd' list."
            )
        return self.add(disclosure.claim_name, disclosure.digest(self.hash_alg))

    def add_decoy_digest(self) -> str:
        """Add one decoy digest computed from fresh random bytes."""
        digest = random_digest(self.hash_alg, self._random_source)
        self._decoy_digests.add(digest)
        return digest

    def add_decoy_digests(self, count: int) -> list[str]:
        """Add ``count`` independent decoy digests."""
        return [self.add_decoy_digest() for _ in range(count)]

    def remove_digest(self, claim_name: str) -> Optional[str]:
        """Remove the digest registered for a claim name, if any."""
        return self._claim_digests.pop(claim_name, None)

    def __len__(self) -> int:
        return len(self._claim_digests) + len(self._decoy_digests)

    def build(self) -> list[str]:
        """Return all digests sorted lexicographically.

        Sorting hides the order in which claims and decoys were added, so
        the position of a digest reveals nothing about the claim behind it.
        """
        return sorted([*self._claim_digests.values(), *self._decoy_digests])
