"""
RSA Key Management

Converts between transport-friendly key strings (base64 of DER) and key
objects usable for signing and verification. Uses the cryptography library
for all cryptographic operations.

Public keys are encoded as X.509 SubjectPublicKeyInfo, private keys as
PKCS#8. Decoding also accepts the PKCS#1 variants of both.
"""

import base64
import binascii
from typing import Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from trustedapps.core.signing.errors import KeyFormatError


DEFAULT_KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537


def _b64_to_der(encoded: str, kind: str) -> bytes:
    if not isinstance(encoded, str) or not encoded.strip():
        raise KeyFormatError(f"Empty {kind} key")
    try:
        # Keys pasted from PEM bodies often carry line breaks
        return base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError(f"Invalid base64 in {kind} key: {e}") from e


def generate_keypair(key_size: int = DEFAULT_KEY_SIZE) -> Tuple[rsa.RSAPrivateKey, rsa.RSAPublicKey]:
    """
    Generate a new RSA keypair.

    Returns:
        Tuple of (private_key, public_key)

    Example:
        >>> private_key, public_key = generate_keypair()
        >>> pub_b64 = encode_public_key(public_key)
    """
    private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=key_size)
    return private_key, private_key.public_key()


def encode_public_key(public_key: rsa.RSAPublicKey) -> str:
    """
    Serialize a public key to a base64-encoded DER string.

    Args:
        public_key: RSA public key object

    Returns:
        Base64 of the SubjectPublicKeyInfo DER structure
    """
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode("ascii")


def encode_private_key(private_key: rsa.RSAPrivateKey) -> str:
    """
    Serialize a private key to a base64-encoded PKCS#8 DER string.

    WARNING: the result is unencrypted key material. Handle with care.
    """
    der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return base64.b64encode(der).decode("ascii")


def decode_public_key(encoded: str) -> rsa.RSAPublicKey:
    """
    Deserialize a base64-encoded DER public key.

    Args:
        encoded: Base64 of a SubjectPublicKeyInfo (or PKCS#1) structure

    Returns:
        RSA public key object

    Raises:
        KeyFormatError: If the base64, the DER structure or the key type is invalid
    """
    der = _b64_to_der(encoded, "public")
    try:
        public_key = serialization.load_der_public_key(der)
    except (ValueError, TypeError) as e:
        raise KeyFormatError(f"Invalid public key: {e}") from e
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyFormatError(f"Not an RSA public key: {type(public_key).__name__}")
    return public_key


def decode_private_key(encoded: str) -> rsa.RSAPrivateKey:
    """
    Deserialize a base64-encoded DER private key.

    Args:
        encoded: Base64 of a PKCS#8 (or PKCS#1) structure

    Returns:
        RSA private key object

    Raises:
        KeyFormatError: If the base64, the DER structure or the key type is invalid
    """
    der = _b64_to_der(encoded, "private")
    try:
        private_key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError) as e:
        raise KeyFormatError(f"Invalid private key: {e}") from e
    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise KeyFormatError(f"Not an RSA private key: {type(private_key).__name__}")
    return private_key


def keys_match(private_key: rsa.RSAPrivateKey, public_key: rsa.RSAPublicKey) -> bool:
    """Check that ``public_key`` is the public half of ``private_key``."""
    return private_key.public_key().public_numbers() == public_key.public_numbers()
