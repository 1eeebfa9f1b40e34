"""
Identity Service API - Wire contract of the remote identity service.

Field names are stable and snake_case. Passkey authentication and token
refresh go through the bootstrap transport (no bearer token); everything
else goes through the main transport.
"""

from typing import Any, Dict, List, Optional

from momentum_auth.transport.http import SessionTransport


class IdentityServiceAPI:
    """Thin mapping of identity service endpoints onto the two transports."""

    def __init__(self, transport: SessionTransport, bootstrap: SessionTransport):
        """
        Initialize API.

        Args:
            transport: Main transport (bearer token, refresh-on-401)
            bootstrap: Unauthenticated transport for pre-session calls
        """
        self._transport = transport
        self._bootstrap = bootstrap

    # Phone login

    async def request_phone_code(self, phone: str, country: str) -> Any:
        return await self._transport.post(
            "/auth/phone/login", {"phone": phone, "country": country}
        )

    async def verify_phone_code(
        self,
        phone: str,
        code: str,
        country: str,
        device_id: str,
        fcm_token: Optional[str],
        user_agent: str,
    ) -> Dict[str, Any]:
        return await self._transport.post(
            "/auth/phone/verify",
            {
                "phone": phone,
                "code": code,
                "country": country,
                "device_id": device_id,
                "fcm_token": fcm_token,
                "user_agent": user_agent,
            },
        )

    # Passkey authentication (pre-session)

    async def passkey_authentication_options(self, phone: str) -> Any:
        return await self._bootstrap.post(
            "/auth/passkey/authenticate/options", {"phone": phone}
        )

    async def verify_passkey_authentication(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._bootstrap.post("/auth/passkey/authenticate/verify", payload)

    # Passkey registration (session required)

    async def passkey_registration_options(self, name: str) -> Any:
        return await self._transport.post("/auth/passkey/register/options", {"name": name})

    async def verify_passkey_registration(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._transport.post("/auth/passkey/register/verify", payload)

    async def passkey_registration_trigger(self) -> Dict[str, Any]:
        return await self._transport.get("/auth/passkey/register/trigger")

    # Passkey credentials

    async def list_passkey_credentials(self) -> List[Dict[str, Any]]:
        return await self._transport.get("/auth/passkey/credentials") or []

    async def delete_passkey_credential(self, credential_id: str) -> Any:
        return await self._transport.delete(f"/auth/passkey/credentials/{credential_id}")

    # Devices

    async def list_devices(self) -> List[Dict[str, Any]]:
        return await self._transport.get("/devices") or []

    async def get_device(self, device_id: str) -> Dict[str, Any]:
        return await self._transport.get(f"/devices/{device_id}")

    async def update_device(self, device_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self._transport.patch(f"/devices/{device_id}", fields)

    async def logout_device(self, device_id: str) -> Any:
        return await self._transport.delete(f"/devices/{device_id}")

    async def logout_all_devices(self) -> Any:
        return await self._transport.post("/devices/logout/all")
