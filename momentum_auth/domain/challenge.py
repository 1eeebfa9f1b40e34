"""
Credential Challenge Domain Model - Server-issued WebAuthn options.

The identity service returns options either as a JSON object or as a
JSON-encoded string (py_webauthn's options_to_json), sometimes wrapped in a
{"publicKey": {...}} envelope. CredentialChallenge.parse normalizes all of
these into one value and rejects anything without a challenge.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Union
from enum import Enum

from momentum_auth.errors import MalformedChallenge


class CeremonyKind(Enum):
    """Which ceremony a challenge was issued for."""
    REGISTRATION = "registration"
    AUTHENTICATION = "authentication"


@dataclass(frozen=True)
class CredentialChallenge:
    """
    Single-use options payload for one ceremony.

    Domain rules:
    - challenge is a non-empty string
    - options is handed to the platform ceremony verbatim; rp id and
      origin are never substituted on the client
    - reuse is detected by the server, not here
    """
    kind: CeremonyKind
    challenge: str
    options: Dict[str, Any]
    rp_id: Optional[str] = None
    timeout_ms: Optional[int] = None
    user_verification: Optional[str] = None
    allow_credentials: List[Dict[str, Any]] = field(default_factory=list)
    exclude_credentials: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def timeout(self) -> Optional[float]:
        """Ceremony timeout in seconds, if the server set one."""
        if self.timeout_ms is None:
            return None
        return self.timeout_ms / 1000.0

    @classmethod
    def parse(
        cls,
        payload: Union[str, bytes, Dict[str, Any], None],
        kind: CeremonyKind,
    ) -> "CredentialChallenge":
        """
        Normalize a server options payload.

        Args:
            payload: Response body, as object or JSON-encoded string
            kind: Ceremony the options are for

        Returns:
            CredentialChallenge

        Raises:
            MalformedChallenge: If the payload is unparsable or has no challenge
        """
        options = payload
        if isinstance(options, (str, bytes)):
            try:
                options = json.loads(options)
            except ValueError as e:
                raise MalformedChallenge(f"Invalid {kind.value} options format") from e

        if isinstance(options, dict) and isinstance(options.get("publicKey"), dict):
            options = options["publicKey"]

        if not isinstance(options, dict):
            raise MalformedChallenge(f"Invalid {kind.value} options format")

        challenge = options.get("challenge")
        if not isinstance(challenge, str) or not challenge:
            raise MalformedChallenge(f"{kind.value.capitalize()} options have no challenge")

        if kind is CeremonyKind.REGISTRATION:
            rp = options.get("rp")
            rp_id = rp.get("id") if isinstance(rp, dict) else None
        else:
            rp_id = options.get("rpId")

        timeout = options.get("timeout")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            timeout = None

        selection = options.get("authenticatorSelection")
        user_verification = options.get("userVerification")
        if user_verification is None and isinstance(selection, dict):
            user_verification = selection.get("userVerification")

        return cls(
            kind=kind,
            challenge=challenge,
            options=options,
            rp_id=rp_id,
            timeout_ms=int(timeout) if timeout is not None else None,
            user_verification=user_verification,
            allow_credentials=list(options.get("allowCredentials") or []),
            exclude_credentials=list(options.get("excludeCredentials") or []),
        )
