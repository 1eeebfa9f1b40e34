"""
OTP Login Flow - Phone one-time code login.

Login success is unconditional once the code verifies; passkey enrollment
afterwards is a fire-and-forget task whose failure is only logged.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional, Set

from momentum_auth.config import AuthConfig
from momentum_auth.domain.user import AuthenticatedUser
from momentum_auth.errors import AuthError, EnrollmentFailure
from momentum_auth.services.tokens import TokenManager
from momentum_auth.services.webauthn import WebAuthnOrchestrator
from momentum_auth.transport.api import IdentityServiceAPI

logger = logging.getLogger(__name__)


def mask_phone(phone: Optional[str]) -> str:
    """Mask all but the last two digits of a phone number for logs."""
    if not phone:
        return "<none>"
    return "*" * max(len(phone) - 2, 0) + phone[-2:]


class OtpState(Enum):
    """OTP login states."""
    IDLE = "idle"
    CODE_REQUESTED = "code_requested"
    VERIFIED = "verified"


class OtpLoginFlow:
    """
    Request and verify phone one-time codes.

    Example:
        flow = OtpLoginFlow(api, tokens, webauthn)
        await flow.request_code("+15551234567", "US")
        user = await flow.verify_code("+15551234567", "123456", "US",
                                      device_id, user_agent)
    """

    def __init__(
        self,
        api: IdentityServiceAPI,
        tokens: TokenManager,
        webauthn: Optional[WebAuthnOrchestrator] = None,
        config: Optional[AuthConfig] = None,
    ):
        """
        Initialize OTP flow.

        Args:
            api: Identity service API
            tokens: Token manager receiving the session
            webauthn: Orchestrator used for opportunistic enrollment
                (enrollment is skipped when None)
            config: Client configuration
        """
        self._api = api
        self._tokens = tokens
        self._webauthn = webauthn
        self._config = config or AuthConfig()
        self._enrollments: Set[asyncio.Task] = set()
        self.state = OtpState.IDLE
        self.phone: Optional[str] = None
        self.country: Optional[str] = None

    async def request_code(self, phone: str, country: str) -> None:
        """
        Ask the server to send a one-time code.

        Raises:
            RequestRejected, TransportError, AuthRejected: Not retried
        """
        await self._api.request_phone_code(phone, country)
        self.state = OtpState.CODE_REQUESTED
        self.phone = phone
        self.country = country
        logger.info("Verification code requested for %s (%s)", mask_phone(phone), country)

    async def verify_code(
        self,
        phone: str,
        code: str,
        country: str,
        device_id: str,
        user_agent: str,
        fcm_token: Optional[str] = None,
    ) -> AuthenticatedUser:
        """
        Verify a one-time code and store the session.

        The session is stored and the flow is VERIFIED before enrollment
        is scheduled; enrollment never affects the return value.

        Returns:
            Logged-in user

        Raises:
            RequestRejected: Wrong or expired code
            AuthRejected: Response lacked a token pair
            TransportError: Network/server failure
        """
        data = await self._api.verify_phone_code(
            phone, code, country, device_id, fcm_token, user_agent
        )
        self._tokens.acquire(data)
        self.state = OtpState.VERIFIED
        logger.info("Phone %s verified", mask_phone(phone))

        self._schedule_enrollment()
        return AuthenticatedUser.from_profile(data.get("user"), phone=phone, country=country)

    def reset(self) -> None:
        self.state = OtpState.IDLE
        self.phone = None
        self.country = None

    def _schedule_enrollment(self) -> None:
        if self._webauthn is None:
            return
        task = asyncio.ensure_future(self._enroll())
        self._enrollments.add(task)
        task.add_done_callback(self._enrollment_done)

    def _enrollment_done(self, task: asyncio.Task) -> None:
        self._enrollments.discard(task)
        if task.cancelled():
            logger.info("Passkey enrollment cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.warning("Passkey enrollment failed: %s", error)

    async def _enroll(self) -> Optional[Dict[str, Any]]:
        """Offer passkey enrollment if the server says the user has none."""
        try:
            trigger = await self._api.passkey_registration_trigger()
        except AuthError as e:
            raise EnrollmentFailure(f"Enrollment trigger failed: {e.message}") from e

        if not isinstance(trigger, dict) or trigger.get("has_passkeys", True):
            logger.debug("Passkey enrollment not needed")
            return None

        options = trigger.get("options")
        if options is None:
            logger.debug("Enrollment trigger returned no options")
            return None

        try:
            return await self._webauthn.register(self._config.enrollment_name, options=options)
        except AuthError as e:
            raise EnrollmentFailure(e.message) from e

    @property
    def pending_enrollments(self) -> int:
        return len(self._enrollments)

    async def wait_for_enrollment(self) -> None:
        """Wait for scheduled enrollment tasks. Never raises their errors."""
        if self._enrollments:
            await asyncio.gather(*list(self._enrollments), return_exceptions=True)
