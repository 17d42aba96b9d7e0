"""
Trusted Apps Authentication for FastAPI

Dependency-style adapter: rejected requests raise HTTPException(403) with a
plain message. Use TrustedAppsMiddleware (api/middleware.py) instead when a
structured 401 body is wanted for every route.

Setup:
    app = FastAPI()
    init_trusted_apps(app)  # loads config/trusted_apps.yaml

    @app.get("/api/things")
    async def things(user: AuthenticatedIdentity = Depends(TrustedAppAuth())):
        ...
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Response, status

from trustedapps.core.config import TrustedAppsConfig, load_trusted_apps_config
from trustedapps.core.signing.canonical import RequestMeta
from trustedapps.core.signing.headers import HEADER_STATUS, STATUS_ERROR, STATUS_OK
from trustedapps.core.signing.verify import (
    NO_CERTIFICATE_MESSAGE,
    AuthenticatedIdentity,
    TrustedAppsAuthenticator,
)

logger = logging.getLogger(__name__)


def init_trusted_apps(app: FastAPI, config: Optional[TrustedAppsConfig] = None) -> TrustedAppsAuthenticator:
    """
    Initialize trusted apps authentication for an application.

    Call this once during startup, before serving requests. Configuration
    and key errors propagate: serving with a broken trust setup is unsafe.
    """
    if config is None:
        config = load_trusted_apps_config()
    authenticator = TrustedAppsAuthenticator(config)
    app.state.trusted_apps = authenticator
    logger.info(f"Trusted apps auth initialized ({len(authenticator.registry)} trusted apps)")
    return authenticator


def get_authenticator(request: Request) -> TrustedAppsAuthenticator:
    """Get the authenticator stored by init_trusted_apps()."""
    authenticator = getattr(request.app.state, "trusted_apps", None)
    if authenticator is None:
        raise RuntimeError("Trusted apps not initialized: call init_trusted_apps(app) at startup")
    return authenticator


def request_meta_from_request(request: Request) -> RequestMeta:
    """Build the framework-neutral request view from a Starlette request."""
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return RequestMeta(headers=request.headers, scheme=request.url.scheme, path=path)


def get_current_app_user(request: Request) -> Optional[AuthenticatedIdentity]:
    """Identity attached by a successful verification, or None."""
    return getattr(request.state, "user", None)


class TrustedAppAuth:
    """
    FastAPI dependency verifying trusted app headers.

    Args:
        authenticator: Authenticator to use (default: the one on app.state)
        auto_error: If True, requests without a certificate are rejected;
            if False, they pass through and the dependency returns None

    Example:
        @app.get("/api/data")
        async def get_data(user = Depends(TrustedAppAuth(auto_error=False))):
            if user is None:
                ...  # anonymous caller
    """

    def __init__(self, authenticator: Optional[TrustedAppsAuthenticator] = None, auto_error: bool = True):
        self.authenticator = authenticator
        self.auto_error = auto_error

    async def __call__(self, request: Request, response: Response) -> Optional[AuthenticatedIdentity]:
        authenticator = self.authenticator or get_authenticator(request)
        outcome = authenticator.verify_request(request_meta_from_request(request))

        if outcome.is_pass_through:
            if self.auto_error:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=NO_CERTIFICATE_MESSAGE,
                    headers={HEADER_STATUS: STATUS_ERROR},
                )
            return None

        if outcome.is_rejected:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=outcome.message,
                headers={HEADER_STATUS: STATUS_ERROR},
            )

        response.headers[HEADER_STATUS] = STATUS_OK
        request.state.user = outcome.identity
        return outcome.identity
