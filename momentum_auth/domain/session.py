"""
Session Domain Model - Access/refresh token pair held by the client.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import time

import jwt


def decode_expiry(token: Optional[str]) -> Optional[float]:
    """
    Read the `exp` claim of a JWT without verifying its signature.

    Args:
        token: Encoded JWT

    Returns:
        Expiry as a POSIX timestamp, or None if absent or malformed
    """
    if not token:
        return None

    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None

    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return float(exp)


@dataclass(frozen=True)
class Session:
    """
    Session entity - an access token and its refresh token.

    Domain rules:
    - access_token and refresh_token are always written together
    - expires_at is derived from the access token, never stored
    - the client cannot verify signatures; expiry is advisory
    """
    access_token: str
    refresh_token: str

    @property
    def expires_at(self) -> Optional[datetime]:
        """Expiry decoded from the access token's exp claim."""
        exp = decode_expiry(self.access_token)
        if exp is None:
            return None
        return datetime.fromtimestamp(exp, tz=timezone.utc)

    def is_expired(self, now: Optional[float] = None) -> bool:
        """
        Check access token expiry without network access.

        Returns True if the exp claim is absent, malformed, or in the past.
        """
        exp = decode_expiry(self.access_token)
        if exp is None:
            return True
        current = time.time() if now is None else now
        return exp < current

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire shape used by the identity service."""
        return {
            "access": self.access_token,
            "refresh": self.refresh_token,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        """Deserialize from a {access, refresh} payload."""
        return cls(access_token=data["access"], refresh_token=data["refresh"])

    def __repr__(self) -> str:
        return f"Session(expires_at={self.expires_at!r})"
