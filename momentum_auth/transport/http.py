"""
Session Transport - Outbound request pipeline to the identity service.

Two configurations share one cookie jar:
- the main transport, built with BearerTokenAuth: attaches the access
  token and replays a request once after a successful refresh on 401
- the bootstrap transport, built without it: used before a session exists
  (passkey authentication) and for the refresh call itself

Both attach the anti-forgery token to state-changing requests.
"""

import logging
from http.cookiejar import CookieJar
from typing import Any, Optional, TYPE_CHECKING

import httpx

from momentum_auth.config import AuthConfig, SAFE_METHODS
from momentum_auth.errors import (
    AuthRejected,
    RequestRejected,
    TransportError,
)

if TYPE_CHECKING:
    from momentum_auth.services.tokens import TokenManager

logger = logging.getLogger(__name__)


class BearerTokenAuth(httpx.Auth):
    """
    Bearer token auth with one-shot refresh-and-replay.

    Each logical request runs this flow once, so a 401 triggers at most
    one refresh and at most one replay. A 401 on the replay is returned
    to the caller as is.
    """

    def __init__(self, tokens: "TokenManager"):
        self._tokens = tokens

    def sync_auth_flow(self, request):
        raise RuntimeError("BearerTokenAuth requires httpx.AsyncClient")

    async def async_auth_flow(self, request: httpx.Request):
        token = self._tokens.access_token
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

        response = yield request

        if response.status_code != 401:
            return

        logger.info("%s %s returned 401, refreshing session", request.method, request.url.path)
        if not await self._tokens.refresh(failed_token=token):
            return

        request.headers["Authorization"] = f"Bearer {self._tokens.access_token}"
        yield request


def error_message(response: httpx.Response) -> Optional[str]:
    """Extract the server's human-readable error message, if any."""
    try:
        body = response.json()
    except ValueError:
        return None

    if isinstance(body, dict):
        for field in ("message", "detail", "error"):
            value = body.get(field)
            if isinstance(value, str) and value:
                return value
    return None


def raise_for_status(response: httpx.Response) -> None:
    """
    Map an error response onto the auth error taxonomy.

    Raises:
        AuthRejected: 401
        RequestRejected: other 4xx
        TransportError: 5xx
    """
    status = response.status_code
    if status < 400:
        return

    message = error_message(response)
    if status == 401:
        raise AuthRejected(message, status_code=status)
    if status < 500:
        raise RequestRejected(message, status_code=status)
    raise TransportError(message, status_code=status)


class SessionTransport:
    """
    JSON request pipeline over an httpx.AsyncClient.

    Example:
        jar = CookieJar()
        bootstrap = SessionTransport(config, cookie_jar=jar)
        tokens = TokenManager(store, bootstrap)
        api = SessionTransport(config, cookie_jar=jar, auth=BearerTokenAuth(tokens))

        devices = await api.get("/devices")
    """

    def __init__(
        self,
        config: AuthConfig,
        cookie_jar: Optional[CookieJar] = None,
        auth: Optional[httpx.Auth] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize transport.

        Args:
            config: Client configuration
            cookie_jar: Cookie jar shared with sibling transports
            auth: httpx auth flow (BearerTokenAuth for the main transport)
            transport: httpx transport override (tests use httpx.MockTransport)
        """
        self._config = config
        self._cookie_jar = cookie_jar if cookie_jar is not None else CookieJar()
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            auth=auth,
            cookies=self._cookie_jar,
            transport=transport,
            headers={"Accept": "application/json"},
            event_hooks={"request": [self._attach_csrf_token]},
        )

    @property
    def cookie_jar(self) -> CookieJar:
        return self._cookie_jar

    def csrf_token(self) -> Optional[str]:
        """Current anti-forgery token from the protection cookie."""
        for cookie in self._cookie_jar:
            if cookie.name == self._config.csrf_cookie_name and cookie.value:
                return cookie.value
        return None

    async def _attach_csrf_token(self, request: httpx.Request) -> None:
        if request.method in SAFE_METHODS:
            return
        token = self.csrf_token()
        if token:
            request.headers[self._config.csrf_header_name] = token

    async def request(self, method: str, path: str, json: Any = None) -> Any:
        """
        Send a request and decode the JSON response.

        Args:
            method: HTTP method
            path: Endpoint path (normalized with config.path)
            json: Optional JSON body

        Returns:
            Decoded JSON body, raw text for non-JSON bodies, None if empty

        Raises:
            AuthRejected, RequestRejected, TransportError
        """
        url = self._config.path(path)
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"Unable to reach the server: {e}") from e

        raise_for_status(response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()
