"""
Unit tests for the certificate codec.
"""
import base64

import pytest

from trustedapps.core.signing.certificate import Certificate, create_certificate, decode_certificate
from trustedapps.core.signing.errors import CertificateFormatError


class TestCreateCertificate:

    def test_wire_format(self):
        """Certificate is base64 of timestamp, newline, username."""
        cert = create_certificate("1700000000000", "bob")
        assert base64.b64decode(cert) == b"1700000000000\nbob"

    def test_accepts_integer_timestamp(self):
        assert decode_certificate(create_certificate(1700000000000, "bob")).timestamp == "1700000000000"

    def test_newline_in_timestamp_rejected(self):
        with pytest.raises(CertificateFormatError):
            create_certificate("17\n00", "bob")


class TestDecodeCertificate:

    @pytest.mark.parametrize("timestamp,username", [
        ("1700000000000", "bob"),
        ("2024-01-01T00:00:00Z", "alice@example.com"),
        ("0", ""),
        ("1", "usér ünïcode"),
    ])
    def test_round_trip(self, timestamp, username):
        assert decode_certificate(create_certificate(timestamp, username)) == Certificate(timestamp, username)

    def test_username_keeps_everything_after_first_newline(self):
        """Newlines in usernames are not rejected; they end up in the username."""
        cert = create_certificate("1", "line1\nline2")
        assert decode_certificate(cert).username == "line1\nline2"

    @pytest.mark.parametrize("bad", ["not base64!", "abc", "YWJj\x00"])
    def test_invalid_base64_raises(self, bad):
        with pytest.raises(CertificateFormatError):
            decode_certificate(bad)

    def test_missing_separator_raises(self):
        cert = base64.b64encode(b"no-separator").decode()
        with pytest.raises(CertificateFormatError, match="separator"):
            decode_certificate(cert)

    def test_non_utf8_raises(self):
        cert = base64.b64encode(b"\xff\xfe\n\xff").decode()
        with pytest.raises(CertificateFormatError):
            decode_certificate(cert)
