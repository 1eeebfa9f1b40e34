"""
Credential Store Port - Interface for durable client-side key-value storage.

Implementations:
- MemoryCredentialStore: In-memory (testing only)
- FileCredentialStore: JSON file on local disk
- RedisCredentialStore: Redis-backed (shared kiosks, server-side rendering)
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, List


class CredentialStorePort(ABC):
    """Port: Persist session tokens and device identity as plain strings."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Storage key (e.g. "access_token")

        Returns:
            Stored value, or None if absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Write a single value.

        Args:
            key: Storage key
            value: Value to store
        """
        pass

    @abstractmethod
    def set_many(self, values: Dict[str, str]) -> None:
        """
        Write several values as one unit.

        Either all values are written or none are. Used for the
        access/refresh token pair.

        Args:
            values: Mapping of key to value
        """
        pass

    @abstractmethod
    def delete(self, *keys: str) -> int:
        """
        Delete values. Missing keys are ignored.

        Args:
            keys: Storage keys

        Returns:
            Number of keys that existed
        """
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """
        List stored keys.

        Returns:
            Stored keys (values not included)
        """
        pass
