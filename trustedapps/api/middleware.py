"""
Trusted Apps Middleware

Verifies trusted app headers on every request. Requests without a
certificate pass through untouched; authentication is only enforced when a
certificate is presented.

Rejections are answered with 401 and a structured body:

    {"success": false, "status": "Unauthorized",
     "errors": [{"id": "unknown-app", "message": "Unknown application: x"}]}
"""
import logging
from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from trustedapps.api.trusted_auth import get_authenticator, request_meta_from_request
from trustedapps.core.signing.headers import HEADER_STATUS, STATUS_ERROR, STATUS_OK
from trustedapps.core.signing.verify import TrustedAppsAuthenticator

logger = logging.getLogger(__name__)


def error_response(reason_id: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={
            "success": False,
            "status": "Unauthorized",
            "errors": [{"id": reason_id, "message": message}],
        },
        headers={HEADER_STATUS: STATUS_ERROR},
    )


class TrustedAppsMiddleware(BaseHTTPMiddleware):
    """
    Attach request.state.user for verified trusted app requests.

    Usage:
        app.add_middleware(TrustedAppsMiddleware, authenticator=authenticator)

    Without an explicit authenticator the one stored on app.state by
    init_trusted_apps() is used.
    """

    def __init__(self, app, authenticator: Optional[TrustedAppsAuthenticator] = None):
        super().__init__(app)
        self.authenticator = authenticator

    async def dispatch(self, request: Request, call_next):
        authenticator = self.authenticator or get_authenticator(request)
        outcome = authenticator.verify_request(request_meta_from_request(request))

        if outcome.is_rejected:
            return error_response(outcome.reason_id, outcome.message)

        if outcome.is_pass_through:
            return await call_next(request)

        request.state.user = outcome.identity
        response = await call_next(request)
        response.headers[HEADER_STATUS] = STATUS_OK
        return response
