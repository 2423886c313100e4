"""Simple APIs for the SD-JWT workflow: issue, present, verify."""

import logging
import time
from typing import Any, Callable, Iterable, Optional, Union

from . import carrier
from .carrier import Signer, Verifier
from .combined import CombinedDocument
from .constants import BINDING_TYPE, CARRIER_TYPE
from .decoder import SDObjectDecoder
from .disclosure import Disclosure
from .encoder import SDObjectEncoder
from .errors import MalformedCarrier, MalformedCombinedDocument, VerificationError

logger = logging.getLogger(__name__)

# A holder verifier can be fixed or resolved from the verified claims (e.g. "cnf")
HolderVerifier = Union[Verifier, Callable[[dict[str, Any]], Verifier]]


def select_disclosures_by_claim_names(
    disclosures: Iterable[Disclosure],
    claim_names: Iterable[str],
) -> list[Disclosure]:
    """Select the object-property disclosures that match the claim names.

    Args:
        disclosures: All available disclosures
        claim_names: Claim names to select

    Returns:
        Selected disclosures, in their original order
    """
    names = set(claim_names)
    return [d for d in disclosures if d.claim_name is not None and d.claim_name in names]


class SDJWTIssuer:
    """Simple API for issuing SD-JWTs."""

    def __init__(
        self,
        signer: Signer,
        encoder: Optional[SDObjectEncoder] = None,
        header: Optional[dict[str, Any]] = None,
    ):
        """Initialize with the issuer's signer.

        Args:
            signer: Signer for the issuer's key
            encoder: Encoder to use (a default one that tags '_sd_alg' if None)
            header: Extra header parameters for the carrier
        """
        self.signer = signer
        self.encoder = encoder or SDObjectEncoder(include_hash_algorithm=True)
        self.header = dict(header or {})

    def issue(self, claims: dict[str, Any]) -> CombinedDocument:
        """Issue an SD-JWT.

        Every claim except the retained ones is made selectively disclosable.

        Args:
            claims: The claims of the credential

        Returns:
            Combined document with all disclosures and no binding document

        Example:
            sd_jwt = issuer.issue({"iss": "https://issuer.example", "given_name": "Jane"})
        """
        payload = self.encoder.encode(claims)
        disclosures = list(self.encoder.disclosures)

        header = {"typ": CARRIER_TYPE, **self.header}
        credential = carrier.sign_compact(payload, self.signer, header=header)

        logger.debug("Issued SD-JWT with %d disclosures", len(disclosures))
        return CombinedDocument(credential, disclosures)


class SDJWTPresenter:
    """Simple API for presenting a subset of an SD-JWT's disclosures."""

    def __init__(self, holder_signer: Optional[Signer] = None):
        """Initialize with the holder's signer.

        Args:
            holder_signer: Signer for the holder's key; without one no
                binding document is created
        """
        self.holder_signer = holder_signer

    def present(
        self,
        credential: Union[CombinedDocument, str],
        disclosures: Iterable[Disclosure],
        audience: Optional[str] = None,
        nonce: Optional[str] = None,
        issued_at: Optional[int] = None,
    ) -> CombinedDocument:
        """Create a presentation.

        Args:
            credential: The issued SD-JWT
            disclosures: The disclosures to reveal
            audience: Verifier identifier (aud claim of the binding document)
            nonce: Challenge from the verifier
            issued_at: Time of presentation (uses current time if None)

        Returns:
            Combined document with the selected disclosures and, when a
            holder signer is configured, a binding document
        """
        if isinstance(credential, str):
            credential = CombinedDocument.parse(credential)

        presentation = CombinedDocument(credential.carrier, disclosures)
        if self.holder_signer is None:
            return presentation

        binding_payload: dict[str, Any] = {
            "iat": issued_at if issued_at is not None else int(time.time()),
            "sd_hash": presentation.sd_hash,
        }
        if audience is not None:
            binding_payload["aud"] = audience
        if nonce is not None:
            binding_payload["nonce"] = nonce

        binding = carrier.sign_compact(
            binding_payload, self.holder_signer, header={"typ": BINDING_TYPE}
        )
        return presentation.with_binding(binding)


class SDJWTVerifier:
    """Simple API for verifying a presented SD-JWT and recovering its claims."""

    def __init__(
        self,
        issuer_verifier: Verifier,
        holder_verifier: Optional[HolderVerifier] = None,
        require_binding: bool = False,
    ):
        """Initialize the verifier.

        Args:
            issuer_verifier: Verifier for the issuer's signature
            holder_verifier: Verifier for the binding document, or a callable
                that returns one from the verified claims
            require_binding: Reject presentations without a binding document
        """
        self.issuer_verifier = issuer_verifier
        self.holder_verifier = holder_verifier
        self.require_binding = require_binding
        self.decoder = SDObjectDecoder()

    def verify(
        self,
        presentation: Union[CombinedDocument, str],
        audience: Optional[str] = None,
        nonce: Optional[str] = None,
    ) -> dict[str, Any]:
        """Verify a presentation and return the disclosed claims.

        Args:
            presentation: The presented SD-JWT
            audience: Expected aud claim of the binding document
            nonce: Expected nonce claim of the binding document

        Returns:
            Claims restored from the carrier payload and the disclosures

        Raises:
            VerificationError: If any check fails
            SDJWTError: If the presentation or the payload is malformed
        """
        if isinstance(presentation, str):
            try:
                presentation = CombinedDocument.parse(presentation)
            except MalformedCombinedDocument as e:
                raise VerificationError(f"Malformed presentation: {e}") from e

        is_valid, payload = carrier.verify_compact(presentation.carrier, self.issuer_verifier)
        if not is_valid or payload is None:
            raise VerificationError("The signature of the carrier document is invalid")

        claims = self.decoder.decode(payload, presentation.disclosures)

        if presentation.binding is not None:
            self._verify_binding(presentation, claims, audience, nonce)
        elif self.require_binding:
            raise VerificationError("The presentation has no binding document")

        logger.debug(
            "Verified presentation with %d disclosures", len(presentation.disclosures)
        )
        return claims

    def _verify_binding(
        self,
        presentation: CombinedDocument,
        claims: dict[str, Any],
        audience: Optional[str],
        nonce: Optional[str],
    ) -> None:
        if self.holder_verifier is None:
            raise VerificationError("No verifier is configured for the binding document")

        holder_verifier = self.holder_verifier
        if not hasattr(holder_verifier, "verify"):
            holder_verifier = holder_verifier(claims)

        binding = presentation.binding
        try:
            header = carrier.read_header(binding)
        except MalformedCarrier as e:
            raise VerificationError(f"Malformed binding document: {e}") from e

        if header.get("typ") != BINDING_TYPE:
            raise VerificationError("The binding document has an unexpected 'typ'")

        is_valid, binding_payload = carrier.verify_compact(binding, holder_verifier)
        if not is_valid or binding_payload is None:
            raise VerificationError("The signature of the binding document is invalid")

        if binding_payload.get("sd_hash") != presentation.sd_hash:
            raise VerificationError("The 'sd_hash' of the binding document does not match")

        if audience is not None and binding_payload.get("aud") != audience:
            raise VerificationError("The 'aud' of the binding document does not match")

        if nonce is not None and binding_payload.get("nonce") != nonce:
            raise VerificationError("The 'nonce' of the binding document does not match")
