"""
Auth Client - High-level SDK for UI collaborators.

Wires the credential store, transports, token manager and login flows
together and exposes the capability surface the UI needs.
"""

import logging
from http.cookiejar import CookieJar
from typing import Any, Callable, Dict, List, Optional

import httpx

from momentum_auth.config import AuthConfig
from momentum_auth.domain.device import DeviceIdentity, save_fcm_token
from momentum_auth.domain.session import Session
from momentum_auth.domain.user import ANONYMOUS, AuthenticatedUser
from momentum_auth.errors import AuthError
from momentum_auth.ports.ceremony_port import CeremonyPort
from momentum_auth.ports.store_port import CredentialStorePort
from momentum_auth.adapters.file_store import FileCredentialStore
from momentum_auth.services.devices import DeviceService
from momentum_auth.services.fallback import LoginOutcome, FallbackCoordinator
from momentum_auth.services.otp import OtpLoginFlow
from momentum_auth.services.passkeys import PasskeyCredentialService
from momentum_auth.services.tokens import TokenManager
from momentum_auth.services.webauthn import WebAuthnOrchestrator
from momentum_auth.transport.api import IdentityServiceAPI
from momentum_auth.transport.http import BearerTokenAuth, SessionTransport

logger = logging.getLogger(__name__)

PASSKEY_FALLBACK_MESSAGE = "Failed to authenticate with passkey. Try using a verification code instead."

AuthStateListener = Callable[[AuthenticatedUser], None]


class AuthClient:
    """
    High-level auth client combining token lifecycle, OTP and passkey login.

    Example:
        from momentum_auth import AuthClient, AuthConfig
        from momentum_auth.adapters import FileCredentialStore

        async with AuthClient(
            ceremony=my_webview_bridge,
            store=FileCredentialStore(),
            config=AuthConfig.from_env(),
        ) as client:
            client.on_auth_state_changed(lambda user: print(user.is_logged_in))

            if await client.request_code("+15551234567", "US"):
                await client.verify_code("+15551234567", "123456", "US")

            await client.register_passkey("My phone")
            await client.logout()

    Methods that talk to the server return False/None on failure and put
    a user-facing message in `last_error`.
    """

    def __init__(
        self,
        ceremony: CeremonyPort,
        store: Optional[CredentialStorePort] = None,
        config: Optional[AuthConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize auth client.

        Args:
            ceremony: Platform WebAuthn ceremony adapter (required)
            store: Credential store (default FileCredentialStore at config.store_path)
            config: Client configuration (default AuthConfig())
            transport: httpx transport override, shared by both HTTP pipelines
        """
        self.config = config or AuthConfig()
        self.store = store or FileCredentialStore(self.config.store_path)

        cookie_jar = CookieJar()
        self._bootstrap = SessionTransport(self.config, cookie_jar=cookie_jar, transport=transport)
        self.tokens = TokenManager(self.store, self._bootstrap)
        self._transport = SessionTransport(
            self.config,
            cookie_jar=cookie_jar,
            auth=BearerTokenAuth(self.tokens),
            transport=transport,
        )
        self.api = IdentityServiceAPI(self._transport, self._bootstrap)

        self.identity = DeviceIdentity.load(self.store)
        self.passkeys = PasskeyCredentialService(self.api)
        self.webauthn = WebAuthnOrchestrator(
            self.api,
            ceremony,
            self.tokens,
            self.config,
            on_credentials_changed=self.passkeys.fetch,
        )
        self.otp = OtpLoginFlow(self.api, self.tokens, self.webauthn, self.config)
        self.fallback = FallbackCoordinator(self.webauthn, self.otp)
        self.devices = DeviceService(self.api, self.tokens, self.identity)

        self.last_error: Optional[str] = None
        self._listeners: List[AuthStateListener] = []
        # Token presence at startup is taken as logged in; expiry is handled by refresh.
        self._user = AuthenticatedUser(is_logged_in=True) if self.tokens.has_tokens() else ANONYMOUS
        self.tokens.subscribe(self._on_session_changed)

    async def __aenter__(self) -> "AuthClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Wait for background enrollment and close both HTTP pipelines."""
        await self.otp.wait_for_enrollment()
        await self._transport.aclose()
        await self._bootstrap.aclose()

    # Auth state

    def is_logged_in(self) -> bool:
        return self._user.is_logged_in

    def current_user(self) -> AuthenticatedUser:
        return self._user

    def on_auth_state_changed(self, listener: AuthStateListener) -> Callable[[], None]:
        """
        Register a callback for login/logout.

        Args:
            listener: Called with the new AuthenticatedUser

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def on_reauthentication_required(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a callback for when the session could not be refreshed."""
        return self.tokens.on_reauthentication_required(listener)

    def _on_session_changed(self, session: Optional[Session]) -> None:
        if session is None:
            if self._user.is_logged_in:
                self._set_user(ANONYMOUS)
        elif not self._user.is_logged_in:
            self._set_user(AuthenticatedUser(is_logged_in=True))

    def _set_user(self, user: AuthenticatedUser) -> None:
        if user == self._user:
            return
        self._user = user
        for listener in list(self._listeners):
            try:
                listener(user)
            except Exception:
                logger.exception("Auth state listener failed")

    def _fail(self, error: AuthError, fallback: str) -> None:
        self.last_error = error.message or fallback

    # OTP login

    async def request_code(self, phone: str, country: str) -> bool:
        """
        Send a verification code to a phone.

        Returns:
            True if the server accepted the request
        """
        self.last_error = None
        try:
            await self.otp.request_code(phone, country)
        except AuthError as e:
            self._fail(e, "Failed to send verification code")
            return False
        return True

    async def verify_code(
        self,
        phone: str,
        code: str,
        country: str,
        device_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        fcm_token: Optional[str] = None,
    ) -> bool:
        """
        Verify a code and log in.

        device_id, user_agent and fcm_token default to this installation's
        identity and the configured user agent.

        Returns:
            True if logged in (passkey enrollment may still be running)
        """
        self.last_error = None
        try:
            user = await self.otp.verify_code(
                phone,
                code,
                country,
                device_id=device_id or self.identity.device_id,
                user_agent=user_agent or self.config.user_agent,
                fcm_token=fcm_token if fcm_token is not None else self.identity.fcm_token,
            )
        except AuthError as e:
            self._fail(e, "Failed to verify code")
            return False

        self.fallback.reset()
        self._set_user(user)
        return True

    # Passkeys

    async def start_passkey_authentication(self, phone: str, country: str = "US") -> LoginOutcome:
        """
        Log in with a passkey, falling back to a verification code.

        Args:
            phone: Phone number entered by the user
            country: Country entered by the user (kept for the fallback)

        Returns:
            LoginOutcome; method "otp" means a code was requested instead
        """
        self.last_error = None
        outcome = await self.fallback.login(
            phone,
            country,
            device_id=self.identity.device_id,
            user_agent=self.config.user_agent,
            fcm_token=self.identity.fcm_token,
        )

        if outcome.logged_in:
            self._set_user(outcome.user)
        elif outcome.code_error is not None:
            self._fail(outcome.code_error, "Failed to send verification code")
        else:
            self.last_error = PASSKEY_FALLBACK_MESSAGE
        return outcome

    async def register_passkey(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Register a passkey for the logged-in user.

        Returns:
            Credential record, or None on failure
        """
        self.last_error = None
        try:
            return await self.webauthn.register(name)
        except AuthError as e:
            self._fail(e, "Failed to register passkey")
            return None

    async def list_passkeys(self) -> List[Dict[str, Any]]:
        if not self.is_logged_in():
            return []
        self.last_error = None
        try:
            return await self.passkeys.fetch()
        except AuthError as e:
            self._fail(e, "Failed to fetch passkey credentials")
            return self.passkeys.credentials

    async def delete_passkey(self, credential_id: str) -> bool:
        self.last_error = None
        try:
            await self.passkeys.delete(credential_id)
        except AuthError as e:
            self._fail(e, "Failed to delete passkey credential")
            return False
        return True

    # Session end

    async def logout(self, device_id: Optional[str] = None) -> bool:
        """
        Log out locally, signing out a device on the server first if given.

        The local session is always cleared.

        Returns:
            False if the server sign-out failed
        """
        self.last_error = None
        ok = True
        if device_id:
            try:
                await self.api.logout_device(device_id)
            except AuthError as e:
                logger.warning("Server sign-out of device failed: %s", e.message)
                self._fail(e, "Failed to logout")
                ok = False

        self.tokens.clear()
        self.passkeys.clear()
        self.otp.reset()
        self.fallback.reset()
        self._set_user(ANONYMOUS)
        return ok

    def set_fcm_token(self, token: str) -> None:
        """Store the push notification token sent on the next login."""
        save_fcm_token(self.store, token)
        self.identity = DeviceIdentity(device_id=self.identity.device_id, fcm_token=token)
