"""
Redis Credential Store - Redis-backed token storage.
"""

from typing import Optional, List, Dict
from momentum_auth.ports.store_port import CredentialStorePort


class RedisCredentialStore(CredentialStorePort):
    """
    Redis-backed credential storage.

    Values are stored as plain string keys under a per-installation prefix.
    Token pairs are written in a MULTI/EXEC transaction.
    """

    def __init__(
        self,
        redis_client=None,
        prefix: str = "momentum:credentials:",
        redis_url: str = "redis://localhost:6379/0",
    ):
        """
        Initialize Redis credential store.

        Args:
            redis_client: Redis client instance (redis.Redis), decode_responses=True
            prefix: Key prefix, scope it per installation
            redis_url: URL used when no client is given
        """
        self._redis = redis_client
        self._prefix = prefix
        self._redis_url = redis_url

    def _get_redis(self):
        """Lazy load Redis client."""
        if self._redis is None:
            try:
                import redis
            except ImportError:
                raise ImportError("redis package required: pip install redis")
            self._redis = redis.Redis.from_url(self._redis_url, decode_responses=True)
        return self._redis

    def _key(self, key: str) -> str:
        """Generate Redis key for a stored value."""
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        value = self._get_redis().get(self._key(key))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        self._get_redis().set(self._key(key), value)

    def set_many(self, values: Dict[str, str]) -> None:
        """Write all values in one transaction."""
        pipe = self._get_redis().pipeline(transaction=True)
        for key, value in values.items():
            pipe.set(self._key(key), value)
        pipe.execute()

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(self._get_redis().delete(*(self._key(k) for k in keys)))

    def keys(self) -> List[str]:
        redis = self._get_redis()
        result = []
        for key in redis.scan_iter(f"{self._prefix}*"):
            if isinstance(key, bytes):
                key = key.decode("utf-8")
            result.append(key[len(self._prefix):])
        return result
