"""
User Domain Model - Derived authentication state of the current user.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional


@dataclass(frozen=True)
class AuthenticatedUser:
    """
    Authenticated user state.

    Domain rules:
    - recomputed on every successful login and on startup from token presence
    - profile fields are only known after a login that returned them
    - cleared (ANONYMOUS) on logout or irrecoverable refresh failure
    """
    is_logged_in: bool
    phone: Optional[str] = None
    country: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def name(self) -> Optional[str]:
        """Full name if any part is known."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None

    @classmethod
    def from_profile(
        cls,
        profile: Optional[Dict[str, Any]],
        phone: Optional[str] = None,
        country: Optional[str] = None,
    ) -> "AuthenticatedUser":
        """
        Build a logged-in user from a server `user` payload.

        Args:
            profile: `user` object from a verify response (may be None)
            phone: Phone used to log in, when the server omits it
            country: Country used to log in, when the server omits it
        """
        profile = profile or {}
        return cls(
            is_logged_in=True,
            phone=profile.get("phone") or phone,
            country=profile.get("country") or country,
            first_name=profile.get("first_name"),
            last_name=profile.get("last_name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict."""
        return {
            "is_logged_in": self.is_logged_in,
            "phone": self.phone,
            "country": self.country,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }


ANONYMOUS = AuthenticatedUser(is_logged_in=False)
