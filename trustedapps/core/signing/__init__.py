"""
Trusted Apps Request Signing Module

RSA certificate-based authentication for service-to-service requests.
A caller signs {timestamp}\\n{url}\\n{username} with its private key; the
receiver verifies it with the public key registered for the caller's
provider id.
"""

from trustedapps.core.signing.errors import (
    TrustedAppsError,
    KeyFormatError,
    CertificateFormatError,
)
from trustedapps.core.signing.headers import (
    HEADER_PROVIDER_ID,
    HEADER_CERTIFICATE,
    HEADER_SIGNATURE,
    HEADER_STATUS,
    HEADER_ERROR_CODE,
    HEADER_ERROR_MESSAGE,
    HEADER_REQUESTED_URI,
)
from trustedapps.core.signing.keys import (
    generate_keypair,
    encode_public_key,
    encode_private_key,
    decode_public_key,
    decode_private_key,
)
from trustedapps.core.signing.certificate import (
    Certificate,
    create_certificate,
    decode_certificate,
)
from trustedapps.core.signing.signature import (
    SIGNATURE_ALGORITHM,
    build_payload,
    sign,
    verify,
)
from trustedapps.core.signing.registry import TrustedApp, TrustRegistry
from trustedapps.core.signing.canonical import (
    RequestMeta,
    get_header_value,
    get_request_url,
    normalize_url,
)
from trustedapps.core.signing.verify import (
    AuthenticatedIdentity,
    RejectionReason,
    TrustedAppsAuthenticator,
    VerificationOutcome,
    VerificationStatus,
)

__all__ = [
    # Errors
    "TrustedAppsError",
    "KeyFormatError",
    "CertificateFormatError",
    # Headers
    "HEADER_PROVIDER_ID",
    "HEADER_CERTIFICATE",
    "HEADER_SIGNATURE",
    "HEADER_STATUS",
    "HEADER_ERROR_CODE",
    "HEADER_ERROR_MESSAGE",
    "HEADER_REQUESTED_URI",
    # Keys
    "generate_keypair",
    "encode_public_key",
    "encode_private_key",
    "decode_public_key",
    "decode_private_key",
    # Certificates
    "Certificate",
    "create_certificate",
    "decode_certificate",
    # Signatures
    "SIGNATURE_ALGORITHM",
    "build_payload",
    "sign",
    "verify",
    # Registry
    "TrustedApp",
    "TrustRegistry",
    # Canonicalization
    "RequestMeta",
    "get_header_value",
    "get_request_url",
    "normalize_url",
    # Verification
    "AuthenticatedIdentity",
    "RejectionReason",
    "TrustedAppsAuthenticator",
    "VerificationOutcome",
    "VerificationStatus",
]
