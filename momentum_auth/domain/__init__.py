"""
Domain Models - Pure client-side auth entities.

No infrastructure dependencies. Domain logic only.
"""

from momentum_auth.domain.user import AuthenticatedUser, ANONYMOUS
from momentum_auth.domain.session import Session, decode_expiry
from momentum_auth.domain.device import DeviceIdentity
from momentum_auth.domain.challenge import CredentialChallenge, CeremonyKind
from momentum_auth.domain.credential import AssertionResponse, AttestationResponse

__all__ = [
    "AuthenticatedUser",
    "ANONYMOUS",
    "Session",
    "decode_expiry",
    "DeviceIdentity",
    "CredentialChallenge",
    "CeremonyKind",
    "AssertionResponse",
    "AttestationResponse",
]
