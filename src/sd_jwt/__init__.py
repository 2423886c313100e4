"""SD-JWT: selective disclosure encoding for JSON documents."""

__version__ = "0.1.0"

# Hide module imports
from . import carrier, combined, decoder, digest, disclosure, encoder, salts
from .carrier import (
    Signer,
    Verifier,
    read_header,
    read_payload,
    sign_compact,
    split_compact,
    verify_compact,
)
from .combined import (
    CombinedDocument,
    CombinedFormat,
    Issuance,
    Presentation,
    compute_sd_hash,
    parse_combined_format,
    serialize,
)
from .constants import (
    DEFAULT_HASH_ALGORITHM,
    KEY_SD,
    KEY_SD_ALG,
    KEY_SD_JWT,
    KEY_THREE_DOTS,
    RESERVED_KEYS,
    RETAINED_CLAIMS,
)
from .decoder import SDObjectDecoder
from .digest import digest_b64, random_digest, resolve_hash_algorithm
from .digest_list import DigestListBuilder
from .disclosure import Disclosure
from .encoder import SDObjectEncoder
from .errors import (
    ArrayDisclosureInObjectContext,
    InvalidEncodedObject,
    MalformedArrayMarker,
    MalformedCarrier,
    MalformedCombinedDocument,
    MalformedDisclosure,
    NestingTooDeep,
    NotArrayDisclosure,
    ObjectDisclosureInArrayContext,
    ReservedKey,
    SDJWTError,
    UnsupportedAlgorithm,
    VerificationError,
)
from .object_builder import SDObjectBuilder
from .salts import RandomSource, SecureRandomSource, SeededRandomSource
from .simple_api import (
    SDJWTIssuer,
    SDJWTPresenter,
    SDJWTVerifier,
    select_disclosures_by_claim_names,
)

del carrier, combined, decoder, digest, disclosure, encoder, salts


__all__ = [
    "__version__",
    # Disclosures and digests
    "Disclosure",
    "digest_b64",
    "random_digest",
    "resolve_hash_algorithm",
    # Encoding and decoding
    "SDObjectEncoder",
    "SDObjectDecoder",
    "SDObjectBuilder",
    "DigestListBuilder",
    # Combined documents
    "CombinedDocument",
    "serialize",
    "compute_sd_hash",
    # Legacy combined format
    "CombinedFormat",
    "Issuance",
    "Presentation",
    "parse_combined_format",
    # Compact tokens and protocols for custom implementations
    "Signer",
    "Verifier",
    "sign_compact",
    "verify_compact",
    "split_compact",
    "read_header",
    "read_payload",
    # Random sources for deterministic testing
    "RandomSource",
    "SecureRandomSource",
    "SeededRandomSource",
    # Simple API
    "SDJWTIssuer",
    "SDJWTPresenter",
    "SDJWTVerifier",
    "select_disclosures_by_claim_names",
    # Constants
    "DEFAULT_HASH_ALGORITHM",
    "KEY_SD",
    "KEY_SD_ALG",
    "KEY_SD_JWT",
    "KEY_THREE_DOTS",
    "RESERVED_KEYS",
    "RETAINED_CLAIMS",
    # Errors
    "SDJWTError",
    "UnsupportedAlgorithm",
    "MalformedDisclosure",
    "ReservedKey",
    "NotArrayDisclosure",
    "ArrayDisclosureInObjectContext",
    "ObjectDisclosureInArrayContext",
    "InvalidEncodedObject",
    "MalformedArrayMarker",
    "NestingTooDeep",
    "MalformedCombinedDocument",
    "MalformedCarrier",
    "VerificationError",
]
