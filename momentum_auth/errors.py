"""
Error taxonomy for the authentication manager.

Every failure the manager can produce resolves to one of these types:
- TransportError: network failure or 5xx (caller may retry, never auto-retried)
- AuthRejected: 401 / invalid credential (refresh once, then terminal)
- RequestRejected: any other 4xx (bad code, unknown phone, ...)
- MalformedChallenge: options payload unusable, no ceremony attempted
- CeremonyDeclined / CeremonyTimedOut / CeremonyAborted: user-side outcomes
- EnrollmentFailure: best-effort passkey enrollment failed (logged only)
"""

from typing import Optional


class AuthError(Exception):
    """Base class for all authentication manager errors."""

    default_message = "Authentication failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)


class TransportError(AuthError):
    """Network failure or server-side (5xx) error."""

    default_message = "Unable to reach the server"


class AuthRejected(AuthError):
    """The server rejected the credentials (HTTP 401)."""

    default_message = "Authentication required"


class RequestRejected(AuthError):
    """The server rejected the request (HTTP 4xx other than 401)."""

    default_message = "Request was rejected"


class MalformedChallenge(AuthError):
    """Passkey options payload is missing required fields or unparsable."""

    default_message = "Invalid passkey options format"


class CeremonyError(AuthError):
    """Base for user-side WebAuthn ceremony outcomes."""

    default_message = "Passkey ceremony failed"
    reason = "failed"


class CeremonyDeclined(CeremonyError):
    default_message = "The passkey request was declined"
    reason = "declined"


class CeremonyTimedOut(CeremonyError):
    default_message = "The operation either timed out or was not allowed"
    reason = "timed_out"


class CeremonyAborted(CeremonyError):
    default_message = "The passkey ceremony was aborted"
    reason = "aborted"


class EnrollmentFailure(AuthError):
    """Opportunistic passkey enrollment after OTP login failed."""

    default_message = "Passkey enrollment failed"


# Platform (DOMException) names reported by credential ceremonies.
_CEREMONY_ERRORS = {
    "AbortError": CeremonyAborted,
    "NotAllowedError": CeremonyTimedOut,
    "TimeoutError": CeremonyTimedOut,
    "InvalidStateError": CeremonyDeclined,
}


def ceremony_error(name: str, message: Optional[str] = None) -> CeremonyError:
    """
    Map a platform ceremony error name to a CeremonyError.

    Args:
        name: Error name reported by the platform (e.g. "NotAllowedError")
        message: Optional platform message

    Returns:
        CeremonyError subclass instance (CeremonyDeclined if unknown)
    """
    error_cls = _CEREMONY_ERRORS.get(name, CeremonyDeclined)
    return error_cls(message)
