"""
Device Identity - Stable per-installation identifier.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEVICE_ID_KEY = "device_id"
FCM_TOKEN_KEY = "fcm_token"


@dataclass(frozen=True)
class DeviceIdentity:
    """
    Per-installation identity.

    Domain rules:
    - device_id is generated once (UUID4) and never mutated
    - only an explicit data reset removes it
    """
    device_id: str
    fcm_token: Optional[str] = None

    @classmethod
    def load(cls, store) -> "DeviceIdentity":
        """
        Load the device identity, creating the device id on first access.

        Args:
            store: Credential store holding the identity

        Returns:
            DeviceIdentity for this installation
        """
        device_id = store.get(DEVICE_ID_KEY)
        if not device_id:
            device_id = str(uuid.uuid4())
            store.set(DEVICE_ID_KEY, device_id)
            logger.info("Generated device id %s", device_id)

        return cls(device_id=device_id, fcm_token=store.get(FCM_TOKEN_KEY))


def save_fcm_token(store, token: str) -> None:
    """Persist the push notification token for this device."""
    store.set(FCM_TOKEN_KEY, token)
