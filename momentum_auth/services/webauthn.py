"""
WebAuthn Ceremony Orchestrator - Passkey registration and authentication.

Each ceremony is a strict three-step protocol:
1. options fetch (CredentialChallenge from the server)
2. platform ceremony with the options exactly as received
3. server verification of the attestation/assertion

There is no retry inside an attempt; a new attempt fetches a new challenge.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from momentum_auth.config import AuthConfig
from momentum_auth.domain.challenge import CeremonyKind, CredentialChallenge
from momentum_auth.domain.session import Session
from momentum_auth.domain.user import AuthenticatedUser
from momentum_auth.errors import AuthError, CeremonyAborted, CeremonyError, CeremonyTimedOut
from momentum_auth.ports.ceremony_port import CeremonyPort
from momentum_auth.services.tokens import TokenManager
from momentum_auth.transport.api import IdentityServiceAPI

logger = logging.getLogger(__name__)


class CeremonyState(Enum):
    """Lifecycle of one ceremony attempt."""
    IDLE = "idle"
    OPTIONS_REQUESTED = "options_requested"
    AWAITING_USER_CEREMONY = "awaiting_user_ceremony"
    VERIFYING = "verifying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_NEXT_STATES = {
    CeremonyState.IDLE: {CeremonyState.OPTIONS_REQUESTED, CeremonyState.AWAITING_USER_CEREMONY},
    CeremonyState.OPTIONS_REQUESTED: {CeremonyState.AWAITING_USER_CEREMONY},
    CeremonyState.AWAITING_USER_CEREMONY: {CeremonyState.VERIFYING},
    CeremonyState.VERIFYING: {CeremonyState.SUCCEEDED},
    CeremonyState.SUCCEEDED: set(),
    CeremonyState.FAILED: set(),
}


@dataclass
class CeremonyAttempt:
    """
    One registration or authentication attempt.

    Moves forward only; any state except SUCCEEDED may fail.
    """
    kind: CeremonyKind
    state: CeremonyState = CeremonyState.IDLE
    error: Optional[AuthError] = None
    history: List[CeremonyState] = field(default_factory=lambda: [CeremonyState.IDLE])

    @property
    def reason(self) -> Optional[str]:
        """Failure reason: ceremony outcome or error class name."""
        if self.error is None:
            return None
        if isinstance(self.error, CeremonyError):
            return self.error.reason
        return type(self.error).__name__

    def advance(self, state: CeremonyState) -> None:
        if state not in _NEXT_STATES[self.state]:
            raise RuntimeError(f"Invalid ceremony transition {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, error: AuthError) -> None:
        if self.state is CeremonyState.SUCCEEDED:
            raise RuntimeError("Cannot fail a succeeded ceremony")
        self.state = CeremonyState.FAILED
        self.error = error
        self.history.append(CeremonyState.FAILED)


@dataclass(frozen=True)
class PasskeyLogin:
    """Outcome of a successful passkey authentication."""
    user: AuthenticatedUser
    session: Session
    device: Optional[Dict[str, Any]] = None


class WebAuthnOrchestrator:
    """
    Drives passkey ceremonies against the identity service.

    The relying party id and origin come from the server options and are
    never overridden here; a substituted rp id produces signatures the
    server cannot verify.
    """

    def __init__(
        self,
        api: IdentityServiceAPI,
        ceremony: CeremonyPort,
        tokens: TokenManager,
        config: Optional[AuthConfig] = None,
        on_credentials_changed: Optional[Callable[[], Awaitable[Any]]] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            api: Identity service API
            ceremony: Platform ceremony adapter
            tokens: Token manager receiving the session on authentication
            config: Client configuration
            on_credentials_changed: Awaited after a passkey is registered
                (e.g. PasskeyCredentialService.fetch)
        """
        self._api = api
        self._ceremony = ceremony
        self._tokens = tokens
        self._config = config or AuthConfig()
        self._on_credentials_changed = on_credentials_changed
        self._attempts: Dict[CeremonyKind, CeremonyAttempt] = {}

    @property
    def authentication_attempt(self) -> Optional[CeremonyAttempt]:
        """Most recent passkey login attempt."""
        return self._attempts.get(CeremonyKind.AUTHENTICATION)

    @property
    def registration_attempt(self) -> Optional[CeremonyAttempt]:
        """Most recent registration attempt, including background enrollment."""
        return self._attempts.get(CeremonyKind.REGISTRATION)

    def _begin(self, kind: CeremonyKind) -> CeremonyAttempt:
        # One slot per kind; background enrollment only replaces REGISTRATION.
        attempt = CeremonyAttempt(kind=kind)
        self._attempts[kind] = attempt
        return attempt

    async def _run_ceremony(self, step: Callable[[CredentialChallenge], Awaitable[Any]], challenge: CredentialChallenge) -> Any:
        """Run the platform ceremony, bounded by the server timeout plus grace."""
        limit = None
        if challenge.timeout is not None:
            limit = challenge.timeout + self._config.ceremony_grace

        try:
            return await asyncio.wait_for(step(challenge), timeout=limit)
        except asyncio.TimeoutError:
            raise CeremonyTimedOut()
        except AuthError:
            raise
        except Exception as e:
            logger.warning("Ceremony adapter failed: %r", e)
            raise CeremonyAborted(str(e) or None) from e

    async def authenticate(
        self,
        phone: str,
        device_id: str,
        user_agent: str,
        fcm_token: Optional[str] = None,
    ) -> PasskeyLogin:
        """
        Log in with a passkey.

        Args:
            phone: Phone number the user claims
            device_id: Stable installation id
            user_agent: Client user agent
            fcm_token: Push notification token, if any

        Returns:
            PasskeyLogin with the stored session and user profile

        Raises:
            MalformedChallenge: Options unusable (no ceremony attempted)
            CeremonyError: User declined, timed out, or aborted (an adapter
                crash is reported as CeremonyAborted)
            AuthRejected, RequestRejected, TransportError: Server/network failure
        """
        attempt = self._begin(CeremonyKind.AUTHENTICATION)
        try:
            attempt.advance(CeremonyState.OPTIONS_REQUESTED)
            payload = await self._api.passkey_authentication_options(phone)
            challenge = CredentialChallenge.parse(payload, CeremonyKind.AUTHENTICATION)

            attempt.advance(CeremonyState.AWAITING_USER_CEREMONY)
            logger.debug("Starting authentication ceremony (rp_id=%s)", challenge.rp_id)
            assertion = await self._run_ceremony(self._ceremony.get, challenge)

            attempt.advance(CeremonyState.VERIFYING)
            body = assertion.to_payload()
            body.update({
                "device_id": device_id,
                "fcm_token": fcm_token,
                "user_agent": user_agent,
                "phone": phone,
            })
            data = await self._api.verify_passkey_authentication(body)
            session = self._tokens.acquire(data)
        except AuthError as e:
            attempt.fail(e)
            logger.info("Passkey authentication failed: %s", attempt.reason)
            raise

        attempt.advance(CeremonyState.SUCCEEDED)
        logger.info("Passkey authentication succeeded")
        return PasskeyLogin(
            user=AuthenticatedUser.from_profile(data.get("user"), phone=phone),
            session=session,
            device=data.get("device"),
        )

    async def register(self, name: str, options: Any = None) -> Dict[str, Any]:
        """
        Register a new passkey for the logged-in user.

        Args:
            name: Display name for the credential
            options: Registration options already issued by the server (from
                the enrollment trigger); fetched when omitted

        Returns:
            Credential record returned by the server

        Raises:
            MalformedChallenge: Options unusable (no ceremony attempted)
            CeremonyError: User declined, timed out, or aborted (an adapter
                crash is reported as CeremonyAborted)
            AuthRejected, RequestRejected, TransportError: Server/network failure
        """
        attempt = self._begin(CeremonyKind.REGISTRATION)
        try:
            if options is None:
                attempt.advance(CeremonyState.OPTIONS_REQUESTED)
                options = await self._api.passkey_registration_options(name)
            challenge = CredentialChallenge.parse(options, CeremonyKind.REGISTRATION)

            attempt.advance(CeremonyState.AWAITING_USER_CEREMONY)
            logger.debug("Starting registration ceremony (rp_id=%s)", challenge.rp_id)
            attestation = await self._run_ceremony(self._ceremony.create, challenge)

            attempt.advance(CeremonyState.VERIFYING)
            record = await self._api.verify_passkey_registration(attestation.to_payload(name))
        except AuthError as e:
            attempt.fail(e)
            logger.info("Passkey registration failed: %s", attempt.reason)
            raise

        attempt.advance(CeremonyState.SUCCEEDED)
        logger.info("Passkey %r registered", name)

        if self._on_credentials_changed is not None:
            try:
                await self._on_credentials_changed()
            except AuthError as e:
                logger.warning("Could not refresh passkey list: %s", e.message)

        return record
