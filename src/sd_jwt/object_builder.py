"""Builder for one level of a selectively disclosable JSON object."""

from typing import Any, Optional

from .constants import DEFAULT_HASH_ALGORITHM, KEY_SD, KEY_SD_ALG, is_reserved_key
from .digest_list import DigestListBuilder
from .disclosure import Disclosure
from .errors import ReservedKey
from .salts import RandomSource


class SDObjectBuilder:
    """Assemble plain claims and the '_sd' digest list of one JSON object.

    A claim name holds either a plain value or a disclosure digest, never
    both: whichever was put last wins.
    """

    def __init__(
        self,
        hash_alg: Optional[str] = None,
        random_source: Optional[RandomSource] = None,
    ):
        """Initialize the builder.

        Args:
            hash_alg: Hash algorithm for digests (default "sha-256")
            random_source: Optional random source for salts and decoys
        """
        self.hash_alg = hash_alg or DEFAULT_HASH_ALGORITHM
        self._random_source = random_source
        self._claims: dict[str, Any] = {}
        self._digest_list = DigestListBuilder(self.hash_alg, random_source)

    def put_claim(self, claim_name: str, claim_value: Any) -> None:
        """Put a plain claim, dropping any pending digest for the same name.

        Raises:
            ReservedKey: If the claim name is a reserved key
        """
        if is_reserved_key(claim_name):
            raise ReservedKey(f"The claim name ('{claim_name}') is a reserved key.")

        self._digest_list.remove_digest(claim_name)
        self._claims[claim_name] = claim_value

    def put_sd_claim(self, disclosure: Disclosure) -> Disclosure:
        """Put the digest of an object-property disclosure.

        A plain claim registered under the same name is removed.

        Raises:
            ArrayDisclosureInObjectContext: If the disclosure has no claim name
        """
        self._digest_list.add_disclosure_digest(disclosure)
        self._claims.pop(disclosure.claim_name, None)
        return disclosure

    def put_new_sd_claim(
        self, claim_name: str, claim_value: Any, salt: Optional[str] = None
    ) -> Disclosure:
        """Create a disclosure for the claim and put its digest."""
        if salt is None:
            disclosure = Disclosure.new(claim_name, claim_value, self._random_source)
        else:
            disclosure = Disclosure(salt, claim_name, claim_value)
        return self.put_sd_claim(disclosure)

    def put_decoy_digest(self) -> str:
        return self._digest_list.add_decoy_digest()

    def put_decoy_digests(self, count: int) -> list[str]:
        return self._digest_list.add_decoy_digests(count)

    def build(self, include_hash_algorithm: bool = False) -> dict[str, Any]:
        """Build the JSON object.

        Args:
            include_hash_algorithm: Whether to add the '_sd_alg' key

        Returns:
            The plain claims, plus '_sd' when there is at least one digest,
            plus '_sd_alg' when requested
        """
        output = dict(self._claims)

        digests = self._digest_list.build()
        if digests:
            output[KEY_SD] = digests

        if include_hash_algorithm:
            output[KEY_SD_ALG] = self.hash_alg

        return output
