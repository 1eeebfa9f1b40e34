"""
Fallback Coordinator - Degrade from passkey login to a one-time code.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from momentum_auth.domain.user import AuthenticatedUser
from momentum_auth.errors import AuthError
from momentum_auth.services.otp import OtpLoginFlow, mask_phone
from momentum_auth.services.webauthn import WebAuthnOrchestrator

logger = logging.getLogger(__name__)

PASSKEY = "passkey"
OTP = "otp"


@dataclass(frozen=True)
class LoginOutcome:
    """
    Result of a passkey-first login attempt.

    method is "passkey" when the user is logged in, "otp" when the flow
    fell back to code login (code_requested tells whether a code was sent).
    """
    method: str
    phone: str
    country: str
    user: Optional[AuthenticatedUser] = None
    code_requested: bool = False
    failure: Optional[AuthError] = None
    code_error: Optional[AuthError] = None

    @property
    def logged_in(self) -> bool:
        return self.user is not None and self.user.is_logged_in


class FallbackCoordinator:
    """
    Passkey-first login with automatic fallback to OTP.

    Any passkey failure (declined, timed out, aborted, malformed options,
    server or network error) keeps the phone and country, suppresses the
    passkey path for the rest of this login, and requests a code without
    a second user action.
    """

    def __init__(self, webauthn: WebAuthnOrchestrator, otp: OtpLoginFlow):
        self._webauthn = webauthn
        self._otp = otp
        self.passkey_suppressed = False

    async def login(
        self,
        phone: str,
        country: str,
        device_id: str,
        user_agent: str,
        fcm_token: Optional[str] = None,
    ) -> LoginOutcome:
        """
        Try passkey login, falling back to requesting a one-time code.

        Returns:
            LoginOutcome; never raises AuthError
        """
        if self.passkey_suppressed:
            return await self._fall_back(phone, country, failure=None)

        try:
            result = await self._webauthn.authenticate(
                phone, device_id=device_id, user_agent=user_agent, fcm_token=fcm_token
            )
        except AuthError as e:
            logger.info(
                "Passkey login for %s failed (%s), falling back to code",
                mask_phone(phone),
                type(e).__name__,
            )
            return await self._fall_back(phone, country, failure=e)

        return LoginOutcome(method=PASSKEY, phone=phone, country=country, user=result.user)

    async def _fall_back(self, phone: str, country: str, failure: Optional[AuthError]) -> LoginOutcome:
        self.passkey_suppressed = True
        try:
            await self._otp.request_code(phone, country)
        except AuthError as e:
            logger.warning("Fallback code request failed: %s", e.message)
            return LoginOutcome(
                method=OTP, phone=phone, country=country, failure=failure, code_error=e
            )

        return LoginOutcome(
            method=OTP, phone=phone, country=country, code_requested=True, failure=failure
        )

    def reset(self) -> None:
        """Re-enable the passkey path for a new login."""
        self.passkey_suppressed = False
