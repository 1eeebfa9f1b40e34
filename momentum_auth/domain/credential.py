"""
Ceremony Response Models - Client-produced WebAuthn proofs.

Both are ephemeral: they exist only between ceremony completion and
server verification.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional


@dataclass(frozen=True)
class AssertionResponse:
    """Result of an authentication ceremony (navigator.credentials.get)."""
    credential_id: str
    client_data_json: str
    authenticator_data: str
    signature: str
    user_handle: Optional[str] = None
    raw_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Wire fields for /auth/passkey/authenticate/verify."""
        return {
            "credential_id": self.credential_id,
            "client_data_json": self.client_data_json,
            "authenticator_data": self.authenticator_data,
            "signature": self.signature,
            "user_handle": self.user_handle,
        }

    @classmethod
    def from_browser(cls, data: Dict[str, Any]) -> "AssertionResponse":
        """Build from a PublicKeyCredential JSON (WebAuthn Level 3 toJSON shape)."""
        response = data["response"]
        return cls(
            credential_id=data["id"],
            raw_id=data.get("rawId"),
            client_data_json=response["clientDataJSON"],
            authenticator_data=response["authenticatorData"],
            signature=response["signature"],
            user_handle=response.get("userHandle"),
        )


@dataclass(frozen=True)
class AttestationResponse:
    """Result of a registration ceremony (navigator.credentials.create)."""
    credential_id: str
    client_data_json: str
    attestation_object: str
    raw_id: Optional[str] = None

    def to_payload(self, name: str) -> Dict[str, Any]:
        """Wire fields for /auth/passkey/register/verify."""
        return {
            "credential_id": self.credential_id,
            "raw_id": self.raw_id or self.credential_id,
            "client_data_json": self.client_data_json,
            "attestation_object": self.attestation_object,
            "name": name,
        }

    @classmethod
    def from_browser(cls, data: Dict[str, Any]) -> "AttestationResponse":
        """Build from a PublicKeyCredential JSON (WebAuthn Level 3 toJSON shape)."""
        response = data["response"]
        return cls(
            credential_id=data["id"],
            raw_id=data.get("rawId"),
            client_data_json=response["clientDataJSON"],
            attestation_object=response["attestationObject"],
        )
