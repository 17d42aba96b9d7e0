"""
Outbound Trusted App Signing

httpx authentication that attaches trusted app headers to every request,
so a service can call another service that runs TrustedAppsMiddleware.

Usage:
    auth = TrustedAppsAuth(authenticator, username="bob")
    async with httpx.AsyncClient(auth=auth) as client:
        await client.get("https://other-service/api/things")
"""
import logging
import time
from typing import Generator, Optional

import httpx

from trustedapps.core.signing.verify import TrustedAppsAuthenticator

logger = logging.getLogger(__name__)


def current_timestamp() -> str:
    """Epoch milliseconds, the timestamp format carried in certificates."""
    return str(int(time.time() * 1000))


class TrustedAppsAuth(httpx.Auth):
    """
    Sign each request on behalf of a user.

    The signed URL is the absolute request URL. It must match what the
    receiver reconstructs from scheme, Host header and path (or from the
    X-Requested-URI header set by a proxy in front of it).
    """

    def __init__(
        self,
        authenticator: TrustedAppsAuthenticator,
        username: str,
        provider_id: Optional[str] = None,
    ):
        self.authenticator = authenticator
        self.username = username
        self.provider_id = provider_id

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        url = str(request.url)
        headers = self.authenticator.get_request_headers(
            self.provider_id, current_timestamp(), url, self.username
        )
        request.headers.update(headers)
        logger.debug(f"Signed {request.method} {url} as {self.username}")
        yield request
