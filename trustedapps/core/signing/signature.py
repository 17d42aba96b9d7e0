"""
Signature Engine

Signs and verifies the canonical payload of a trusted app request.

Payload Format:
    {timestamp}\n{url}\n{username}

Where:
    - timestamp: the value carried in the certificate
    - url: canonical request URL (see canonical.get_request_url)
    - username: the value carried in the certificate

The algorithm is fixed (RSA PKCS#1 v1.5 over SHA-1) and never negotiated.
Changing it requires upgrading every participating service together.
"""

import base64
import binascii
import logging
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from trustedapps.core.signing.keys import decode_private_key, decode_public_key

logger = logging.getLogger(__name__)


SIGNATURE_ALGORITHM = "RSA-SHA1"

_PADDING = padding.PKCS1v15()
_HASH = hashes.SHA1()


def build_payload(timestamp: str, url: str, username: str) -> str:
    """
    Create the payload string for signing/verification.

    Example:
        >>> build_payload("1700000000000", "https://example.com/x", "bob")
        '1700000000000\\nhttps://example.com/x\\nbob'
    """
    return f"{timestamp}\n{url}\n{username}"


def sign(payload: str, private_key: Union[rsa.RSAPrivateKey, str]) -> str:
    """
    Sign a payload.

    Args:
        payload: String built by build_payload()
        private_key: RSA private key object, or its base64 DER encoding

    Returns:
        Base64-encoded signature
    """
    if isinstance(private_key, str):
        private_key = decode_private_key(private_key)
    signature = private_key.sign(payload.encode("utf-8"), _PADDING, _HASH)
    return base64.b64encode(signature).decode("ascii")


def verify(payload: str, signature: str, public_key: Union[rsa.RSAPublicKey, str]) -> bool:
    """
    Verify a signature over a payload.

    Args:
        payload: String built by build_payload()
        signature: Base64-encoded signature (from header)
        public_key: RSA public key object, or its base64 DER encoding

    Returns:
        True if the signature is valid, False for any mismatch or malformed signature

    Raises:
        KeyFormatError: If an encoded public key cannot be parsed
    """
    if isinstance(public_key, str):
        public_key = decode_public_key(public_key)

    try:
        signature_bytes = base64.b64decode(signature.strip(), validate=True)
    except (binascii.Error, ValueError, AttributeError) as e:
        logger.debug(f"Invalid base64 signature: {e}")
        return False

    try:
        public_key.verify(signature_bytes, payload.encode("utf-8"), _PADDING, _HASH)
    except InvalidSignature:
        return False
    except Exception as e:
        logger.debug(f"Signature verification error: {e}")
        return False
    return True
