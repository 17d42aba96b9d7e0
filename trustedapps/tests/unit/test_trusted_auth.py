"""
Tests for the TrustedAppAuth dependency (403 adapter) and app setup helpers.
"""
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from trustedapps.api.trusted_auth import TrustedAppAuth, init_trusted_apps
from trustedapps.core.signing.headers import HEADER_SIGNATURE, HEADER_STATUS
from trustedapps.core.signing.verify import TrustedAppsAuthenticator


def create_test_app(config):
    app = FastAPI()
    init_trusted_apps(app, config)

    @app.get("/required")
    async def required(user=Depends(TrustedAppAuth())):
        return {"usercode": user.usercode, "provider": user.provider_id}

    @app.get("/optional")
    async def optional(user=Depends(TrustedAppAuth(auto_error=False))):
        return {"usercode": user.usercode if user else None}

    return app


@pytest.fixture
def client(local_config):
    return TestClient(create_test_app(local_config))


def sign_headers(partner_authenticator, path, provider_id="app1"):
    return partner_authenticator.get_request_headers(provider_id, "1700000000000", f"http://testserver{path}", "bob")


class TestTrustedAppAuth:

    def test_accepted(self, client, partner_authenticator):
        response = client.get("/required", headers=sign_headers(partner_authenticator, "/required"))

        assert response.status_code == 200
        assert response.json() == {"usercode": "bob", "provider": "app1"}
        assert response.headers[HEADER_STATUS] == "OK"

    def test_missing_certificate_forbidden_by_default(self, client):
        response = client.get("/required")

        assert response.status_code == 403
        assert response.json() == {"detail": "No trusted apps certificate found"}

    def test_missing_certificate_allowed_without_auto_error(self, client):
        response = client.get("/optional")

        assert response.status_code == 200
        assert response.json() == {"usercode": None}

    def test_unknown_app_forbidden(self, client, partner_authenticator):
        response = client.get("/optional", headers=sign_headers(partner_authenticator, "/optional", "nobody"))

        assert response.status_code == 403
        assert response.json() == {"detail": "Unknown application: nobody"}
        assert response.headers[HEADER_STATUS] == "Error"

    def test_bad_signature_forbidden_even_when_optional(self, client, partner_authenticator):
        headers = sign_headers(partner_authenticator, "/optional")
        headers[HEADER_SIGNATURE] = headers[HEADER_SIGNATURE][::-1]

        response = client.get("/optional", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"].startswith("Bad signature for URL:")

    def test_explicit_authenticator(self, authenticator, partner_authenticator):
        app = FastAPI()

        @app.get("/x")
        async def x(user=Depends(TrustedAppAuth(authenticator))):
            return {"usercode": user.usercode}

        response = TestClient(app).get("/x", headers=sign_headers(partner_authenticator, "/x"))
        assert response.json() == {"usercode": "bob"}


class TestInitTrustedApps:

    def test_stores_authenticator_on_app_state(self, local_config):
        app = FastAPI()
        authenticator = init_trusted_apps(app, local_config)

        assert isinstance(authenticator, TrustedAppsAuthenticator)
        assert app.state.trusted_apps is authenticator
        assert "app1" in authenticator.registry

    def test_loads_config_when_not_given(self, local_config, monkeypatch):
        import trustedapps.api.trusted_auth as trusted_auth
        monkeypatch.setattr(trusted_auth, "load_trusted_apps_config", lambda: local_config)

        app = FastAPI()
        assert init_trusted_apps(app).provider_id == "local-app"
