"""
Trusted App Request Verification

Per-request decision procedure for incoming trusted app requests, and the
outbound helpers a caller uses to produce the matching headers.

Checks, in order:
1. No certificate header -> pass through unauthenticated
2. Provider id header present
3. Provider id registered in the trust registry
4. Signature header present
5. Signature valid for {timestamp}\n{canonical url}\n{username}

Freshness of the certificate timestamp is deliberately not checked: the
timestamp is signed but never compared with the current time.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from trustedapps.core.config import TrustedAppsConfig
from trustedapps.core.signing.canonical import RequestMeta, get_header_value, get_request_url, normalize_url
from trustedapps.core.signing.certificate import create_certificate, decode_certificate
from trustedapps.core.signing.errors import CertificateFormatError, KeyFormatError
from trustedapps.core.signing.headers import HEADER_CERTIFICATE, HEADER_PROVIDER_ID, HEADER_SIGNATURE
from trustedapps.core.signing.keys import decode_private_key, decode_public_key, keys_match
from trustedapps.core.signing.registry import TrustRegistry
from trustedapps.core.signing.signature import build_payload, sign, verify

logger = logging.getLogger(__name__)


class RejectionReason(Enum):
    """Stable, machine-readable reasons for rejecting a request."""
    NO_CERTIFICATE = "no-certificate"
    NO_PROVIDER_ID = "no-provider-id"
    UNKNOWN_APP = "unknown-app"
    NO_SIGNATURE = "no-signature"
    BAD_SIGNATURE = "bad-signature"


class VerificationStatus(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    PASS_THROUGH = "pass_through"


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Identity attached to a request after successful verification."""
    usercode: str
    provider_id: Optional[str] = None


@dataclass(frozen=True)
class VerificationOutcome:
    """
    Result of verifying one request.

    Attributes:
        status: ACCEPTED, REJECTED or PASS_THROUGH
        reason: Rejection reason (REJECTED only)
        message: Human-readable rejection message (REJECTED only)
        identity: Authenticated identity (ACCEPTED only)
    """
    status: VerificationStatus
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None
    identity: Optional[AuthenticatedIdentity] = None

    @classmethod
    def accepted(cls, identity: AuthenticatedIdentity) -> "VerificationOutcome":
        return cls(status=VerificationStatus.ACCEPTED, identity=identity)

    @classmethod
    def rejected(cls, reason: RejectionReason, message: str) -> "VerificationOutcome":
        return cls(status=VerificationStatus.REJECTED, reason=reason, message=message)

    @classmethod
    def pass_through(cls) -> "VerificationOutcome":
        return cls(status=VerificationStatus.PASS_THROUGH)

    @property
    def is_accepted(self) -> bool:
        return self.status is VerificationStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status is VerificationStatus.REJECTED

    @property
    def is_pass_through(self) -> bool:
        return self.status is VerificationStatus.PASS_THROUGH

    @property
    def reason_id(self) -> Optional[str]:
        return self.reason.value if self.reason else None


NO_CERTIFICATE_MESSAGE = "No trusted apps certificate found"


class TrustedAppsAuthenticator:
    """
    Verifies incoming trusted app requests and signs outgoing ones.

    Owns the local key pair and the trust registry for its whole lifetime;
    neither can be replaced after construction. Build it once at startup and
    share it between requests.
    """

    def __init__(self, config: TrustedAppsConfig):
        """
        Raises:
            KeyFormatError: If any configured key is malformed, or the private
                key does not belong to the configured public key
        """
        self._config = config
        self._private_key = decode_private_key(config.private_key)
        if not keys_match(self._private_key, decode_public_key(config.public_key)):
            raise KeyFormatError(
                f"Private key for '{config.provider_id}' does not match the configured public key"
            )
        self._registry = TrustRegistry.initialize(config.provider_id, config.public_key, config.apps)
        logger.info(f"Trusted apps authenticator ready for provider '{config.provider_id}'")

    @property
    def provider_id(self) -> str:
        return self._config.provider_id

    @property
    def registry(self) -> TrustRegistry:
        return self._registry

    @property
    def allow_multiple_protocols_in_url(self) -> bool:
        return self._config.allow_multiple_protocols_in_url

    # ------------------------------------------------------------------
    # Incoming requests
    # ------------------------------------------------------------------

    def get_request_url(self, request: RequestMeta) -> str:
        return get_request_url(request, self.allow_multiple_protocols_in_url)

    def verify_request(self, request: RequestMeta) -> VerificationOutcome:
        """
        Verify a request.

        Never raises for malformed client input: decoding and crypto failures
        become a bad-signature rejection.

        Example:
            >>> outcome = authenticator.verify_request(meta)
            >>> if outcome.is_rejected:
            ...     # respond with outcome.reason_id / outcome.message
        """
        certificate = get_header_value(request.headers, HEADER_CERTIFICATE)
        provider_id = get_header_value(request.headers, HEADER_PROVIDER_ID)
        signature = get_header_value(request.headers, HEADER_SIGNATURE)

        if not certificate:
            return VerificationOutcome.pass_through()

        if not provider_id:
            return self._reject(RejectionReason.NO_PROVIDER_ID, "Provider ID not found in request")

        if self._registry.lookup(provider_id) is None:
            return self._reject(
                RejectionReason.UNKNOWN_APP, f"Unknown application: {provider_id}", provider_id
            )

        if not signature:
            return self._reject(RejectionReason.NO_SIGNATURE, "Missing signature in request", provider_id)

        url = self.get_request_url(request)
        bad_signature = f"Bad signature for URL: {url}"

        try:
            cert = decode_certificate(certificate)
        except CertificateFormatError as e:
            logger.debug(f"Malformed certificate from {provider_id}: {e}")
            return self._reject(RejectionReason.BAD_SIGNATURE, bad_signature, provider_id)

        payload = build_payload(cert.timestamp, url, cert.username)
        logger.debug(f"Verifying signature: provider={provider_id}, url={url}")

        if not verify(payload, signature, self._registry.public_key(provider_id)):
            return self._reject(RejectionReason.BAD_SIGNATURE, bad_signature, provider_id)

        logger.debug(f"Authenticated {cert.username} via {provider_id}")
        return VerificationOutcome.accepted(
            AuthenticatedIdentity(usercode=cert.username, provider_id=provider_id)
        )

    def _reject(
        self, reason: RejectionReason, message: str, provider_id: Optional[str] = None
    ) -> VerificationOutcome:
        logger.warning(f"Trusted app request rejected: {reason.value} (provider={provider_id})")
        return VerificationOutcome.rejected(reason, message)

    # ------------------------------------------------------------------
    # Outgoing requests
    # ------------------------------------------------------------------

    def create_certificate(self, timestamp: str, username: str) -> str:
        return create_certificate(timestamp, username)

    def create_signature(self, timestamp: str, url: str, username: str) -> str:
        """Sign {timestamp}\\n{url}\\n{username} with the local private key."""
        return sign(build_payload(timestamp, url, username), self._private_key)

    def get_request_headers(
        self,
        provider_id: Optional[str],
        timestamp: str,
        url: str,
        username: str,
    ) -> Dict[str, str]:
        """
        Produce the headers a caller attaches to an outgoing request.

        Args:
            provider_id: Provider id to claim (defaults to the local one)
            timestamp: Issue time, usually epoch milliseconds as a string
            url: Absolute URL of the request, as the receiver will see it
            username: User the call is made on behalf of

        Returns:
            Dict with X-Trusted-App-ProviderID, X-Trusted-App-Cert and
            X-Trusted-App-Signature
        """
        timestamp = str(timestamp)
        url = normalize_url(url, self.allow_multiple_protocols_in_url)
        return {
            HEADER_PROVIDER_ID: provider_id or self.provider_id,
            HEADER_CERTIFICATE: self.create_certificate(timestamp, username),
            HEADER_SIGNATURE: self.create_signature(timestamp, url, username),
        }
