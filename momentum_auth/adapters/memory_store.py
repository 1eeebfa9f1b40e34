"""
Memory Credential Store - In-memory token storage (testing only).
"""

from typing import Optional, List, Dict
from momentum_auth.ports.store_port import CredentialStorePort


class MemoryCredentialStore(CredentialStorePort):
    """
    In-memory credential storage.

    WARNING: Only for testing. Values are lost on restart.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        """Initialize in-memory storage."""
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        """Read a value from memory."""
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Write a value to memory."""
        self._values[key] = value

    def set_many(self, values: Dict[str, str]) -> None:
        """Write several values at once."""
        self._values.update(values)

    def delete(self, *keys: str) -> int:
        """Delete values from memory."""
        removed = 0
        for key in keys:
            if self._values.pop(key, None) is not None:
                removed += 1
        return removed

    def keys(self) -> List[str]:
        """List stored keys."""
        return list(self._values)
