"""
Services - Token lifecycle and login flows.
"""

from momentum_auth.services.tokens import TokenManager
from momentum_auth.services.webauthn import (
    WebAuthnOrchestrator,
    CeremonyAttempt,
    CeremonyState,
    PasskeyLogin,
)
from momentum_auth.services.otp import OtpLoginFlow, OtpState
from momentum_auth.services.fallback import FallbackCoordinator, LoginOutcome
from momentum_auth.services.devices import DeviceService
from momentum_auth.services.passkeys import PasskeyCredentialService

__all__ = [
    "TokenManager",
    "WebAuthnOrchestrator",
    "CeremonyAttempt",
    "CeremonyState",
    "PasskeyLogin",
    "OtpLoginFlow",
    "OtpState",
    "FallbackCoordinator",
    "LoginOutcome",
    "DeviceService",
    "PasskeyCredentialService",
]
