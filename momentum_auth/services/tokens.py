"""
Token Lifecycle Manager - Acquire, refresh and clear the session tokens.

The only component allowed to write tokens to the credential store.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from momentum_auth.domain.session import Session
from momentum_auth.errors import AuthError, AuthRejected
from momentum_auth.ports.store_port import CredentialStorePort
from momentum_auth.transport.http import SessionTransport

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"

SessionListener = Callable[[Optional[Session]], None]


class TokenManager:
    """
    Owns the Session stored in a CredentialStorePort.

    Refresh failures are terminal: the session is cleared, listeners
    registered with on_reauthentication_required are called, and nothing
    is retried. Concurrent refreshes are serialized; a caller whose failed
    token has already been replaced reuses the new session.
    """

    def __init__(
        self,
        store: CredentialStorePort,
        transport: SessionTransport,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize token manager.

        Args:
            store: Credential store holding the tokens
            transport: Bootstrap transport (must not carry BearerTokenAuth)
            clock: Current time as a POSIX timestamp
        """
        self._store = store
        self._transport = transport
        self._clock = clock
        self._lock = asyncio.Lock()
        self._listeners: List[SessionListener] = []
        self._reauth_listeners: List[Callable[[], None]] = []

    @property
    def access_token(self) -> Optional[str]:
        return self._store.get(ACCESS_TOKEN_KEY)

    @property
    def refresh_token(self) -> Optional[str]:
        return self._store.get(REFRESH_TOKEN_KEY)

    @property
    def session(self) -> Optional[Session]:
        """Stored session, or None unless both tokens are present."""
        access, refresh = self.access_token, self.refresh_token
        if not access or not refresh:
            return None
        return Session(access_token=access, refresh_token=refresh)

    def has_tokens(self) -> bool:
        return self.session is not None

    def acquire(self, credentials: Dict[str, Any]) -> Session:
        """
        Store the session from a completed login.

        Args:
            credentials: Verify response containing `access` and `refresh`

        Returns:
            Stored session

        Raises:
            AuthRejected: If either token is missing (nothing is written)
        """
        access = credentials.get("access") if isinstance(credentials, dict) else None
        refresh = credentials.get("refresh") if isinstance(credentials, dict) else None
        if not isinstance(access, str) or not access or not isinstance(refresh, str) or not refresh:
            raise AuthRejected("Login response did not include a token pair")

        session = self._write(access, refresh)
        logger.info("Session acquired (expires_at=%s)", session.expires_at)
        return session

    def is_expired(self) -> bool:
        """
        Check whether the stored access token is expired.

        No network access. True if the token is absent, malformed, has no
        exp claim, or exp is in the past.
        """
        token = self.access_token
        if not token:
            return True
        return Session(access_token=token, refresh_token="").is_expired(now=self._clock())

    async def refresh(self, failed_token: Optional[str] = None) -> bool:
        """
        Exchange the refresh token for a new access token.

        Args:
            failed_token: Access token that was rejected; if the stored token
                differs, another request already refreshed and no call is made

        Returns:
            True if a valid session is stored afterwards, False if the user
            must re-authenticate (session cleared)
        """
        async with self._lock:
            current = self.access_token
            if failed_token and current and current != failed_token:
                logger.debug("Session already refreshed by a concurrent request")
                return True

            refresh_token = self.refresh_token
            if not refresh_token:
                logger.info("No refresh token stored, re-authentication required")
                self._terminate()
                return False

            try:
                data = await self._transport.post("/auth/refresh", {"refresh": refresh_token})
            except AuthError as e:
                logger.warning("Token refresh failed: %s", e.message)
                self._terminate()
                return False

            access = data.get("access") if isinstance(data, dict) else None
            if not isinstance(access, str) or not access:
                logger.warning("Token refresh response had no access token")
                self._terminate()
                return False

            rotated = data.get("refresh")
            self._write(access, rotated if isinstance(rotated, str) and rotated else refresh_token)
            logger.info("Session refreshed")
            return True

    def clear(self) -> None:
        """Remove all session material. Idempotent."""
        if self._store.delete(ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY):
            logger.info("Session cleared")
            self._notify(None)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a callback for session changes.

        Args:
            listener: Called with the new Session, or None when cleared

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def on_reauthentication_required(self, listener: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback for terminal refresh failures.

        Returns:
            Callable that removes the listener
        """
        self._reauth_listeners.append(listener)
        return lambda: self._reauth_listeners.remove(listener) if listener in self._reauth_listeners else None

    def _write(self, access: str, refresh: str) -> Session:
        self._store.set_many({ACCESS_TOKEN_KEY: access, REFRESH_TOKEN_KEY: refresh})
        session = Session(access_token=access, refresh_token=refresh)
        self._notify(session)
        return session

    def _terminate(self) -> None:
        self.clear()
        for listener in list(self._reauth_listeners):
            try:
                listener()
            except Exception:
                logger.exception("Re-authentication listener failed")

    def _notify(self, session: Optional[Session]) -> None:
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.exception("Session listener failed")
