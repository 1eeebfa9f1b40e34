"""
Momentum Auth - Phone and passkey login for app clients

Client-side session and credential lifecycle manager: one-time code login,
passkey (WebAuthn) registration and authentication, silent token refresh,
and automatic fallback from passkeys to codes.

Usage:
    from momentum_auth import AuthClient, AuthConfig
    from momentum_auth.adapters import FileCredentialStore

    client = AuthClient(ceremony=bridge, store=FileCredentialStore())

    # Passkey first, code if that fails
    outcome = await client.start_passkey_authentication("+15551234567", "US")
    if outcome.method == "otp":
        await client.verify_code("+15551234567", code, "US")
"""

__version__ = "0.1.0"

from momentum_auth.sdk.client import AuthClient
from momentum_auth.config import AuthConfig
from momentum_auth.domain.user import AuthenticatedUser
from momentum_auth.domain.session import Session
from momentum_auth.domain.challenge import CredentialChallenge, CeremonyKind
from momentum_auth.services.fallback import LoginOutcome
from momentum_auth.errors import (
    AuthError,
    TransportError,
    AuthRejected,
    RequestRejected,
    MalformedChallenge,
    CeremonyError,
    CeremonyDeclined,
    CeremonyTimedOut,
    CeremonyAborted,
    EnrollmentFailure,
)

__all__ = [
    "AuthClient",
    "AuthConfig",
    "AuthenticatedUser",
    "Session",
    "CredentialChallenge",
    "CeremonyKind",
    "LoginOutcome",
    "AuthError",
    "TransportError",
    "AuthRejected",
    "RequestRejected",
    "MalformedChallenge",
    "CeremonyError",
    "CeremonyDeclined",
    "CeremonyTimedOut",
    "CeremonyAborted",
    "EnrollmentFailure",
]
