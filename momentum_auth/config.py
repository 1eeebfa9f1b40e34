"""
Client configuration.

Settings can be passed explicitly or read from environment variables
with the MOMENTUM_ prefix (e.g. MOMENTUM_API_URL=https://api.example.com).
Values are validated; a malformed variable raises pydantic.ValidationError.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})


class AuthConfig(BaseSettings):
    """
    Settings shared by the transports and flows.

    All settings can be overridden via environment variables with the
    MOMENTUM_ prefix. The base URL is read from MOMENTUM_API_URL.
    """

    model_config = SettingsConfigDict(
        env_prefix="MOMENTUM_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    base_url: str = Field(
        default="http://localhost:8000",
        validation_alias=AliasChoices("MOMENTUM_API_URL", "MOMENTUM_BASE_URL"),
        description="Identity service base URL",
    )

    timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")

    csrf_cookie_name: str = Field(
        default="csrftoken",
        description="Cookie holding the anti-forgery token",
    )

    csrf_header_name: str = Field(
        default="X-CSRFToken",
        description="Header the anti-forgery token is echoed in",
    )

    trailing_slash: bool = Field(
        default=True,
        description='Append "/" to endpoint paths (Django-style routes)',
    )

    user_agent: str = Field(
        default="momentum-auth",
        description="User agent reported to the server on login",
    )

    enrollment_name: str = Field(
        default="Passkey",
        description="Name given to passkeys enrolled after OTP login",
    )

    ceremony_grace: float = Field(
        default=5.0,
        ge=0,
        description="Seconds added to the server ceremony timeout",
    )

    store_path: Optional[str] = Field(
        default=None,
        description="File used by FileCredentialStore",
    )

    @classmethod
    def from_env(cls, prefix: str = "MOMENTUM_") -> "AuthConfig":
        """
        Build config from environment variables.

        Args:
            prefix: Environment variable prefix for every setting except
                the base URL, which is always MOMENTUM_API_URL

        Returns:
            AuthConfig with environment overrides applied

        Raises:
            pydantic.ValidationError: If a variable has an invalid value
        """
        return cls(_env_prefix=prefix)

    def path(self, path: str) -> str:
        """Normalize an endpoint path according to trailing_slash."""
        path = "/" + path.strip("/")
        return path + "/" if self.trailing_slash else path
