"""
Trusted Apps Errors

Key and certificate decoding failures. Both derive from ValueError so
callers that already guard key parsing with ``except ValueError`` keep working.
"""


class TrustedAppsError(Exception):
    """Base class for trusted apps failures."""


class KeyFormatError(TrustedAppsError, ValueError):
    """Encoded key material could not be parsed into an RSA key."""


class CertificateFormatError(TrustedAppsError, ValueError):
    """A certificate is not valid base64 or lacks the field separator."""
