"""Pytest configuration and shared fixtures for SD-JWT tests."""

from typing import Any

import pytest
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, utils

from sd_jwt import Disclosure, SeededRandomSource


class ES256Signer:
    """ECDSA P-256 SHA-256 signer producing raw (r||s) JWS signatures."""

    def __init__(self, private_key: ec.EllipticCurvePrivateKey):
        self.private_key = private_key

    def sign(self, message: bytes) -> bytes:
        """Sign a message with ES256."""
        signature_der = self.private_key.sign(message, ec.ECDSA(hashes.SHA256()))

        # Convert DER to raw (r||s) format for JWS
        r, s = utils.decode_dss_signature(signature_der)
        return r.to_bytes(32, byteorder="big") + s.to_bytes(32, byteorder="big")

    @property
    def algorithm(self) -> str:
        return "ES256"


class ES256Verifier:
    """ECDSA P-256 SHA-256 verifier for raw (r||s) JWS signatures."""

    def __init__(self, public_key: ec.EllipticCurvePublicKey):
        self.public_key = public_key

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify a signature with ES256."""
        if len(signature) != 64:
            return False

        r = int.from_bytes(signature[:32], byteorder="big")
        s = int.from_bytes(signature[32:], byteorder="big")

        try:
            self.public_key.verify(
                utils.encode_dss_signature(r, s), message, ec.ECDSA(hashes.SHA256())
            )
        except InvalidSignature:
            return False
        return True


@pytest.fixture(scope="session")
def issuer_key() -> ec.EllipticCurvePrivateKey:
    """Generate the issuer's EC P-256 key."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def holder_key() -> ec.EllipticCurvePrivateKey:
    """Generate the holder's EC P-256 key."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def issuer_signer(issuer_key: ec.EllipticCurvePrivateKey) -> ES256Signer:
    return ES256Signer(issuer_key)


@pytest.fixture
def issuer_verifier(issuer_key: ec.EllipticCurvePrivateKey) -> ES256Verifier:
    return ES256Verifier(issuer_key.public_key())


@pytest.fixture
def holder_signer(holder_key: ec.EllipticCurvePrivateKey) -> ES256Signer:
    return ES256Signer(holder_key)


@pytest.fixture
def holder_verifier(holder_key: ec.EllipticCurvePrivateKey) -> ES256Verifier:
    return ES256Verifier(holder_key.public_key())


@pytest.fixture
def seeded_source() -> SeededRandomSource:
    """Deterministic random source for reproducible encodings."""
    return SeededRandomSource(42)


@pytest.fixture
def sample_claims() -> dict[str, Any]:
    """Provide sample credential claims for testing."""
    return {
        "iss": "https://issuer.example.com",
        "iat": 1683000000,
        "exp": 1883000000,
        "sub": "user_42",
        "given_name": "Erika",
        "family_name": "Mustermann",
        "email": "erika@example.com",
        "birthdate": "1963-08-12",
        "address": {
            "street_address": "Schulstr. 12",
            "locality": "Schulpforta",
            "region": "Sachsen-Anhalt",
            "country": "DE",
        },
        "nationalities": ["DE", "FR"],
    }


@pytest.fixture
def address_disclosures() -> dict[str, Disclosure]:
    """Disclosures of the address example, keyed by claim name."""
    return {
        "street_address": Disclosure.parse(
            "WyI0d3dqUzlyMm4tblBxdzNpTHR0TkFBIiwgInN0cmVldF9hZGRyZXNzIiwgIlNjaHVsc3RyLiAxMiJd"
        ),
        "locality": Disclosure.parse(
            "WyJXcEtIQmVTa3A5U2MyNVV4a1F1RmNRIiwgImxvY2FsaXR5IiwgIlNjaHVscGZvcnRhIl0"
        ),
        "region": Disclosure.parse(
            "WyIzSl9xWGctdUwxYzdtN1FoT0hUNTJnIiwgInJlZ2lvbiIsICJTYWNoc2VuLUFuaGFsdCJd"
        ),
        "country": Disclosure.parse(
            "WyIwN2U3bWY2YWpTUDJjZkQ3NmJCZE93IiwgImNvdW50cnkiLCAiREUiXQ"
        ),
    }


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line("markers", "unit: fast tests of a single module")
    config.addinivalue_line(
        "markers", "integration: end-to-end issue, present and verify flows"
    )
