"""
Shared fixtures for trusted apps tests.

RSA key generation is slow, so key pairs are created once per session.
"""
import pytest

from trustedapps.core.config import TrustedAppsConfig
from trustedapps.core.signing.canonical import RequestMeta
from trustedapps.core.signing.keys import encode_private_key, encode_public_key, generate_keypair
from trustedapps.core.signing.verify import TrustedAppsAuthenticator


LOCAL_PROVIDER_ID = "local-app"
PARTNER_PROVIDER_ID = "app1"


def _encoded_keypair():
    private_key, public_key = generate_keypair()
    return {
        "private_key": private_key,
        "public_key": public_key,
        "private_b64": encode_private_key(private_key),
        "public_b64": encode_public_key(public_key),
    }


@pytest.fixture(scope="session")
def local_keys():
    """Key pair of the service under test."""
    return _encoded_keypair()


@pytest.fixture(scope="session")
def partner_keys():
    """Key pair of a calling service ("app1")."""
    return _encoded_keypair()


@pytest.fixture(scope="session")
def stranger_keys():
    """Key pair nobody trusts."""
    return _encoded_keypair()


@pytest.fixture
def local_config(local_keys, partner_keys):
    """Config of the receiving service, trusting app1."""
    return TrustedAppsConfig(
        provider_id=LOCAL_PROVIDER_ID,
        public_key=local_keys["public_b64"],
        private_key=local_keys["private_b64"],
        apps={PARTNER_PROVIDER_ID: partner_keys["public_b64"]},
    )


@pytest.fixture
def authenticator(local_config):
    """Authenticator of the receiving service."""
    return TrustedAppsAuthenticator(local_config)


@pytest.fixture
def partner_authenticator(local_keys, partner_keys):
    """Authenticator of app1, used to sign calls to the receiving service."""
    return TrustedAppsAuthenticator(
        TrustedAppsConfig(
            provider_id=PARTNER_PROVIDER_ID,
            public_key=partner_keys["public_b64"],
            private_key=partner_keys["private_b64"],
            apps={LOCAL_PROVIDER_ID: local_keys["public_b64"]},
        )
    )


def make_request(headers=None, scheme="https", path="/api/things", host="service.example.com"):
    """Build a RequestMeta with a Host header."""
    all_headers = {"Host": host}
    all_headers.update(headers or {})
    return RequestMeta(headers=all_headers, scheme=scheme, path=path)


@pytest.fixture
def request_factory():
    """Factory building RequestMeta objects for the orchestrator."""
    return make_request
