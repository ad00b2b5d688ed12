"""
Redis Repository Base Class

Provides key namespacing, Lua script registration and distributed
locking for Redis-backed repositories.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

import redis
from redis.exceptions import LockError, ConnectionError as RedisConnectionError

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base Redis repository with atomic operations and distributed locking."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def register_script(self, lua_source: str):
        """
        Register a Lua script once; the returned callable runs it via EVALSHA.

        Args:
            lua_source: Lua script body

        Returns:
            redis.commands.core.Script callable
        """
        return self.redis.register_script(lua_source)

    @contextmanager
    def distributed_lock(self, lock_name: str, timeout: int = 600,
                         blocking: bool = False,
                         blocking_timeout: float = 5) -> Iterator[bool]:
        """
        Distributed lock context manager using Redis.

        Unlike a plain ``with lock:``, this yields whether the lock was
        acquired so callers can skip work instead of failing.

        Args:
            lock_name: Name of the lock
            timeout: Lock expiry in seconds, so a crashed holder cannot block forever
            blocking: Wait for the lock instead of returning immediately
            blocking_timeout: How long to wait when blocking

        Yields:
            True if this caller holds the lock
        """
        lock_key = self.make_key(f"lock:{lock_name}")
        lock = self.redis.lock(lock_key, timeout=timeout)
        acquired = lock.acquire(
            blocking=blocking,
            blocking_timeout=blocking_timeout if blocking else None,
        )

        try:
            yield acquired
        finally:
            if acquired:
                try:
                    lock.release()
                except LockError:
                    logger.warning(f"Lock {lock_name} expired before release")


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 max_connections: int = 20, decode_responses: bool = False,
                 password: str = None):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisConnectionError:
            return False
