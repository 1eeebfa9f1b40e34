"""
Adapters - Implementations of ports.

Credential Storage:
- MemoryCredentialStore: In-memory storage (testing)
- FileCredentialStore: JSON file on local disk
- RedisCredentialStore: Redis-backed storage
"""

from momentum_auth.adapters.memory_store import MemoryCredentialStore
from momentum_auth.adapters.file_store import FileCredentialStore
from momentum_auth.adapters.redis_store import RedisCredentialStore

__all__ = [
    "MemoryCredentialStore",
    "FileCredentialStore",
    "RedisCredentialStore",
]
