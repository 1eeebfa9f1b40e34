"""
Shared fixtures: a scripted identity service and a scripted ceremony.
"""

import json
import time
from http.cookiejar import CookieJar
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import jwt
import pytest

from momentum_auth.adapters import MemoryCredentialStore
from momentum_auth.config import AuthConfig
from momentum_auth.domain.challenge import CredentialChallenge
from momentum_auth.domain.credential import AssertionResponse, AttestationResponse
from momentum_auth.ports.ceremony_port import CeremonyPort
from momentum_auth.services.tokens import TokenManager
from momentum_auth.transport.api import IdentityServiceAPI
from momentum_auth.transport.http import BearerTokenAuth, SessionTransport

BASE_URL = "https://api.momentum.test"


def make_token(expires_in: int = 3600, **claims) -> str:
    """Mint a signed JWT; the client never verifies the signature."""
    payload = {"sub": "usr_1", "exp": int(time.time()) + expires_in}
    payload.update(claims)
    return jwt.encode(payload, "test-secret-key", algorithm="HS256")


def auth_options(**overrides) -> Dict[str, Any]:
    options = {
        "challenge": "Y2hhbGxlbmdlLWF1dGg",
        "rpId": "momentum.test",
        "timeout": 60000,
        "userVerification": "preferred",
        "allowCredentials": [{"type": "public-key", "id": "Y3JlZC0x"}],
    }
    options.update(overrides)
    return options


def registration_options(**overrides) -> Dict[str, Any]:
    options = {
        "challenge": "Y2hhbGxlbmdlLXJlZw",
        "rp": {"id": "momentum.test", "name": "Momentum"},
        "user": {"id": "dXNyXzE", "name": "+15551234567", "displayName": "Alice"},
        "pubKeyCredParams": [{"type": "public-key", "alg": -7}],
        "timeout": 60000,
        "excludeCredentials": [],
        "authenticatorSelection": {"userVerification": "required"},
    }
    options.update(overrides)
    return options


Responder = Callable[[httpx.Request], httpx.Response]


class FakeIdentityServer:
    """
    Scripted identity service behind httpx.MockTransport.

    Routes are keyed by (method, path without trailing slash). Each route
    holds a queue of responses; the last one repeats.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], List[Responder]] = {}

    def on(self, method: str, path: str, *responses: Any) -> None:
        """
        Script responses for a route.

        Each response is a status code, a (status, body) or
        (status, body, headers) tuple, or a callable taking the request.
        """
        queue = []
        for scripted in responses:
            if callable(scripted):
                queue.append(scripted)
                continue
            if isinstance(scripted, int):
                scripted = (scripted, None)
            queue.append(self._responder(*scripted))
        self._routes[(method.upper(), path.rstrip("/"))] = queue

    @staticmethod
    def _responder(status: int, body: Any = None, headers: Optional[Dict[str, str]] = None) -> Responder:
        def respond(request: httpx.Request) -> httpx.Response:
            if body is None:
                return httpx.Response(status, headers=headers)
            if isinstance(body, str):
                return httpx.Response(status, text=body, headers=headers)
            return httpx.Response(status, json=body, headers=headers)
        return respond

    def handler(self, request: httpx.Request) -> httpx.Response:
        # Copy per send; replays reuse and mutate the same Request object.
        self.requests.append(
            httpx.Request(
                request.method,
                request.url,
                headers=request.headers.copy(),
                content=request.content,
            )
        )
        queue = self._routes.get((request.method, request.url.path.rstrip("/")))
        if not queue:
            return httpx.Response(404, json={"detail": "Not found."})
        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method.upper() and r.url.path.rstrip("/") == path.rstrip("/")
        ]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


class FakeCeremony(CeremonyPort):
    """Scripted platform ceremony that records the options it was given."""

    def __init__(self, error: Optional[Exception] = None, on_call: Optional[Callable[[], None]] = None):
        self.error = error
        self.on_call = on_call
        self.created: List[CredentialChallenge] = []
        self.got: List[CredentialChallenge] = []

    async def create(self, challenge: CredentialChallenge) -> AttestationResponse:
        self.created.append(challenge)
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return AttestationResponse(
            credential_id="Y3JlZC0y",
            raw_id="Y3JlZC0y",
            client_data_json="eyJ0eXBlIjoid2ViYXV0aG4uY3JlYXRlIn0",
            attestation_object="o2NmbXRkbm9uZQ",
        )

    async def get(self, challenge: CredentialChallenge) -> AssertionResponse:
        self.got.append(challenge)
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return AssertionResponse(
            credential_id="Y3JlZC0x",
            client_data_json="eyJ0eXBlIjoid2ViYXV0aG4uZ2V0In0",
            authenticator_data="SZYN5YgOjGh0NBcPZHZgW4",
            signature="MEUCIQD",
            user_handle="dXNyXzE",
        )


@pytest.fixture
def config():
    return AuthConfig(base_url=BASE_URL, user_agent="pytest-agent")


@pytest.fixture
def server():
    return FakeIdentityServer()


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def ceremony():
    return FakeCeremony()


class Stack:
    """Transports, token manager and API wired the way AuthClient wires them."""

    def __init__(self, store, server: FakeIdentityServer, config: AuthConfig):
        jar = CookieJar()
        self.bootstrap = SessionTransport(config, cookie_jar=jar, transport=server.transport)
        self.tokens = TokenManager(store, self.bootstrap)
        self.main = SessionTransport(
            config, cookie_jar=jar, auth=BearerTokenAuth(self.tokens), transport=server.transport
        )
        self.api = IdentityServiceAPI(self.main, self.bootstrap)


@pytest.fixture
def stack(store, server, config):
    return Stack(store, server, config)
