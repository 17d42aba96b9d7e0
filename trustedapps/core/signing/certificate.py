"""
Certificate Codec

A certificate is the caller's identity claim for a single request:

    base64({timestamp}\n{username})

It is created fresh for every outgoing call and never stored.
"""

import base64
import binascii
from dataclasses import dataclass

from trustedapps.core.signing.errors import CertificateFormatError


SEPARATOR = "\n"


@dataclass(frozen=True)
class Certificate:
    """Decoded certificate fields."""
    timestamp: str
    username: str


def create_certificate(timestamp: str, username: str) -> str:
    """
    Encode a timestamp and username into a certificate.

    The username is not validated. The timestamp must not contain the
    separator, otherwise the certificate would decode into different fields.

    Raises:
        CertificateFormatError: If the timestamp contains a newline
    """
    timestamp = str(timestamp)
    if SEPARATOR in timestamp:
        raise CertificateFormatError("Certificate timestamp must not contain a newline")
    raw = f"{timestamp}{SEPARATOR}{username}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_certificate(certificate: str) -> Certificate:
    """
    Decode a certificate into its timestamp and username.

    Splits on the first newline; everything after it is the username.

    Raises:
        CertificateFormatError: If the certificate is not valid base64,
            not UTF-8, or has no separator
    """
    try:
        raw = base64.b64decode(certificate.strip(), validate=True)
        text = raw.decode("utf-8")
    except (binascii.Error, ValueError, AttributeError) as e:
        raise CertificateFormatError(f"Invalid certificate encoding: {e}") from e

    timestamp, separator, username = text.partition(SEPARATOR)
    if not separator:
        raise CertificateFormatError("Certificate has no field separator")
    return Certificate(timestamp=timestamp, username=username)
