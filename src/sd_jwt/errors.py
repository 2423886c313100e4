"""Exception types for SD-JWT encoding and decoding.

Every error is a local validation failure. None of them is retryable; a
caller that catches one should reject the input document.
"""


class SDJWTError(ValueError):
    """Base exception for all SD-JWT errors."""


class UnsupportedAlgorithm(SDJWTError):
    """Raised when a hash algorithm name cannot be resolved."""


class MalformedDisclosure(SDJWTError):
    """Raised when a disclosure string cannot be parsed."""


class ReservedKey(SDJWTError):
    """Raised when a reserved key is used as a claim name."""


class NotArrayDisclosure(SDJWTError):
    """Raised when an object-property disclosure is used as an array element."""


class ArrayDisclosureInObjectContext(SDJWTError):
    """Raised when an array-element disclosure is referenced from an '_sd' list."""


class ObjectDisclosureInArrayContext(SDJWTError):
    """Raised when an object-property disclosure is referenced by a '...' marker."""


class InvalidEncodedObject(SDJWTError):
    """Raised when an encoded object has structurally invalid reserved keys."""


class MalformedArrayMarker(InvalidEncodedObject):
    """Raised when an object holding '...' is not a valid array element marker."""


class NestingTooDeep(SDJWTError):
    """Raised when a document is nested deeper than the configured limit."""


class MalformedCombinedDocument(SDJWTError):
    """Raised when a combined document string cannot be parsed."""


class MalformedCarrier(SDJWTError):
    """Raised when a carrier or binding document is not a compact token."""


class VerificationError(SDJWTError):
    """Raised when a presented SD-JWT fails verification."""
