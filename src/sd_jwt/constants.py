"""Constants shared across the SD-JWT encoding primitives."""

DEFAULT_HASH_ALGORITHM = "sha-256"

# Reserved keys in an encoded JSON object
KEY_SD = "_sd"  # list of digests of hidden object properties
KEY_SD_ALG = "_sd_alg"  # name of the hash algorithm
KEY_SD_JWT = "_sd_jwt"  # historical, never emitted
KEY_THREE_DOTS = "..."  # marker of a hidden array element

RESERVED_KEYS = frozenset({KEY_SD, KEY_SD_ALG, KEY_SD_JWT, KEY_THREE_DOTS})

# Top-level claims that the encoder never makes selectively disclosable
RETAINED_CLAIMS = frozenset({"iss", "iat", "nbf", "exp", "cnf", "type", "status"})

# Delimiter of the combined document format
DELIMITER = "~"

SALT_LENGTH = 16  # 128 bits
DECOY_ENTROPY = 64  # 512 bits of random input per decoy digest

DECOY_MAGNIFICATION_MIN_LIMIT = 0.0
DECOY_MAGNIFICATION_MAX_LIMIT = 10.0
DECOY_MAGNIFICATION_MIN_DEFAULT = 0.5
DECOY_MAGNIFICATION_MAX_DEFAULT = 1.5

DEFAULT_MAX_DEPTH = 100

# Media types used in the "typ" header of carrier and binding documents
CARRIER_TYPE = "dc+sd-jwt"
BINDING_TYPE = "kb+jwt"


def is_reserved_key(key: object) -> bool:
    """Return True if the key must never be used as a claim name."""
    return key in RESERVED_KEYS
