"""
Device Service - Devices signed in to the user's account.
"""

import logging
from typing import Any, Dict, List, Optional

from momentum_auth.domain.device import DeviceIdentity
from momentum_auth.services.tokens import TokenManager
from momentum_auth.transport.api import IdentityServiceAPI

logger = logging.getLogger(__name__)


class DeviceService:
    """List, update and sign out devices; clears the local session when this device is signed out."""

    def __init__(self, api: IdentityServiceAPI, tokens: TokenManager, identity: DeviceIdentity):
        self._api = api
        self._tokens = tokens
        self._identity = identity
        self.devices: List[Dict[str, Any]] = []
        self.current_device: Optional[Dict[str, Any]] = None

    async def list_devices(self) -> List[Dict[str, Any]]:
        """Fetch devices and pick out the current one by device_id."""
        self.devices = await self._api.list_devices()
        self.current_device = next(
            (d for d in self.devices if d.get("device_id") == self._identity.device_id),
            None,
        )
        return self.devices

    async def get_device(self, device_id: str) -> Dict[str, Any]:
        return await self._api.get_device(device_id)

    async def update_fcm_token(self, device_id: str, fcm_token: str) -> Dict[str, Any]:
        device = await self._api.update_device(device_id, {"fcm_token": fcm_token})
        if device_id == self._identity.device_id:
            self.current_device = device
        return device

    async def logout_device(self, device_id: str) -> None:
        """
        Sign out a device.

        Raises:
            AuthError: If the server call fails (local session untouched)
        """
        await self._api.logout_device(device_id)
        if device_id == self._identity.device_id:
            logger.info("Current device signed out")
            self._tokens.clear()
            self.current_device = None
        self.devices = [d for d in self.devices if d.get("device_id") != device_id]

    async def logout_all_devices(self) -> None:
        await self._api.logout_all_devices()
        self._tokens.clear()
        self.devices = []
        self.current_device = None
