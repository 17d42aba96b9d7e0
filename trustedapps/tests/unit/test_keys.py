"""
Unit tests for RSA key encoding and decoding.
"""
import base64

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from trustedapps.core.signing.errors import KeyFormatError
from trustedapps.core.signing.keys import (
    decode_private_key,
    decode_public_key,
    encode_private_key,
    encode_public_key,
    keys_match,
)
from trustedapps.core.signing.signature import sign, verify


class TestDecodePublicKey:

    def test_decodes_encoded_key(self, local_keys):
        key = decode_public_key(local_keys["public_b64"])
        assert isinstance(key, rsa.RSAPublicKey)
        assert key.public_numbers() == local_keys["public_key"].public_numbers()

    def test_accepts_pkcs1_structure(self, local_keys):
        der = local_keys["public_key"].public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.PKCS1,
        )
        key = decode_public_key(base64.b64encode(der).decode("ascii"))
        assert key.public_numbers() == local_keys["public_key"].public_numbers()

    def test_tolerates_line_breaks(self, local_keys):
        encoded = local_keys["public_b64"]
        wrapped = "\n".join(encoded[i:i + 64] for i in range(0, len(encoded), 64))
        assert decode_public_key(wrapped).public_numbers() == local_keys["public_key"].public_numbers()

    @pytest.mark.parametrize("bad", ["", "   ", "not base64 !!", base64.b64encode(b"garbage").decode()])
    def test_malformed_key_raises(self, bad):
        with pytest.raises(KeyFormatError):
            decode_public_key(bad)

    def test_non_rsa_key_rejected(self):
        ec_key = ec.generate_private_key(ec.SECP256R1()).public_key()
        der = ec_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        with pytest.raises(KeyFormatError, match="Not an RSA public key"):
            decode_public_key(base64.b64encode(der).decode())

    def test_key_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode_public_key("%%%")


class TestDecodePrivateKey:

    def test_decodes_encoded_key(self, local_keys):
        key = decode_private_key(local_keys["private_b64"])
        assert isinstance(key, rsa.RSAPrivateKey)
        assert keys_match(key, local_keys["public_key"])

    def test_accepts_traditional_openssl_structure(self, local_keys):
        der = local_keys["private_key"].private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
        key = decode_private_key(base64.b64encode(der).decode())
        assert keys_match(key, local_keys["public_key"])

    def test_public_key_is_not_a_private_key(self, local_keys):
        with pytest.raises(KeyFormatError):
            decode_private_key(local_keys["public_b64"])


class TestRoundTrip:

    def test_reencoded_keys_still_sign_and_verify(self, local_keys):
        private_key = decode_private_key(encode_private_key(decode_private_key(local_keys["private_b64"])))
        public_key = decode_public_key(encode_public_key(decode_public_key(local_keys["public_b64"])))

        signature = sign("payload", private_key)
        assert verify("payload", signature, public_key)

    def test_keys_match_detects_foreign_pair(self, local_keys, partner_keys):
        assert keys_match(local_keys["private_key"], local_keys["public_key"])
        assert not keys_match(local_keys["private_key"], partner_keys["public_key"])
