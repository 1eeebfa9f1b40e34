"""
Passkey Credential Service - The user's registered passkeys.
"""

from typing import Any, Dict, List

from momentum_auth.transport.api import IdentityServiceAPI


class PasskeyCredentialService:
    """Cached list of the user's passkey credentials."""

    def __init__(self, api: IdentityServiceAPI):
        self._api = api
        self.credentials: List[Dict[str, Any]] = []

    async def fetch(self) -> List[Dict[str, Any]]:
        """Reload the credential list from the server."""
        self.credentials = await self._api.list_passkey_credentials()
        return self.credentials

    async def delete(self, credential_id: str) -> List[Dict[str, Any]]:
        """Delete a credential and reload the list."""
        await self._api.delete_passkey_credential(credential_id)
        return await self.fetch()

    def clear(self) -> None:
        self.credentials = []
