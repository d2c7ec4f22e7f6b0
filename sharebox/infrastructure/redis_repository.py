"""
Redis Repository Base Class

Provides JSON storage, list and sorted-set helpers and distributed locking.
Implements the repository pattern for Redis-based data storage.
"""

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Tuple

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError, RedisError

logger = logging.getLogger(__name__)


class RedisRepository:
    """
    Base Redis repository with atomic operations and distributed locking.

    Writes return False when Redis rejects or cannot take them. Reads let
    connection errors propagate, so a missing key is never confused with an
    unreachable store.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    @staticmethod
    def _decode(raw: Any) -> Optional[Dict[str, Any]]:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Discarding malformed JSON value: {e}")
            return None

    def set_json(
        self, key: str, data: Dict[str, Any], ttl: Optional[int] = None, only_if_absent: bool = False
    ) -> bool:
        """
        Set JSON data with optional TTL.

        Args:
            key: Redis key
            data: Dictionary to store as JSON
            ttl: Time to live in seconds
            only_if_absent: Do not overwrite an existing key

        Returns:
            True if the value was written
        """
        try:
            redis_key = self._make_key(key)
            json_data = json.dumps(data)
            result = self.redis.set(redis_key, json_data, ex=ttl, nx=only_if_absent)
            return bool(result)
        except (RedisError, TypeError) as e:
            logger.error(f"Error setting JSON data for key {key}: {e}")
            return False

    def set_many_json(self, items: Iterable[Tuple[str, Dict[str, Any]]]) -> bool:
        """
        Write several JSON values in one MULTI/EXEC transaction.

        Returns:
            True if every value was written
        """
        try:
            pipe = self.redis.pipeline(transaction=True)
            for key, data in items:
                pipe.set(self._make_key(key), json.dumps(data))
            return all(pipe.execute())
        except (RedisError, TypeError) as e:
            logger.error(f"Error writing JSON batch: {e}")
            return False

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Returns:
            Dictionary if found and valid JSON, None otherwise

        Raises:
            redis.exceptions.RedisError: If Redis is unreachable
        """
        return self._decode(self.redis.get(self._make_key(key)))

    def get_many_json(self, keys: List[str]) -> List[Optional[Dict[str, Any]]]:
        """Get several JSON values, preserving order."""
        if not keys:
            return []
        raw_values = self.redis.mget([self._make_key(k) for k in keys])
        return [self._decode(raw) for raw in raw_values]

    def delete(self, *keys: str) -> bool:
        """
        Delete keys from Redis.

        Returns:
            True if at least one key was deleted
        """
        try:
            return self.redis.delete(*[self._make_key(k) for k in keys]) > 0
        except RedisError as e:
            logger.error(f"Error deleting keys {keys}: {e}")
            return False

    def list_append(self, key: str, values: List[str]) -> bool:
        """Append string values to a Redis list."""
        if not values:
            return True
        try:
            self.redis.rpush(self._make_key(key), *values)
            return True
        except RedisError as e:
            logger.error(f"Error appending to list {key}: {e}")
            return False

    def list_range(self, key: str) -> List[str]:
        """Return the whole Redis list as strings."""
        values = self.redis.lrange(self._make_key(key), 0, -1)
        return [v.decode("utf-8") if isinstance(v, bytes) else v for v in values]

    def append_json(self, key: str, data: Dict[str, Any]) -> bool:
        """Append one JSON document to a Redis list."""
        try:
            return self.list_append(key, [json.dumps(data)])
        except TypeError as e:
            logger.error(f"Error serializing entry for list {key}: {e}")
            return False

    def range_json(self, key: str) -> List[Dict[str, Any]]:
        """Return all JSON documents of a Redis list."""
        decoded = (self._decode(raw) for raw in self.list_range(key))
        return [item for item in decoded if item is not None]

    def index_add(self, key: str, member: str, score: float) -> bool:
        """Add a member to a sorted-set index."""
        try:
            self.redis.zadd(self._make_key(key), {member: score})
            return True
        except RedisError as e:
            logger.error(f"Error adding {member} to index {key}: {e}")
            return False

    def index_remove(self, key: str, member: str) -> bool:
        """Remove a member from a sorted-set index."""
        try:
            self.redis.zrem(self._make_key(key), member)
            return True
        except RedisError as e:
            logger.error(f"Error removing {member} from index {key}: {e}")
            return False

    def index_below(self, key: str, max_score: float) -> List[str]:
        """Return members whose score is strictly below ``max_score``."""
        members = self.redis.zrangebyscore(self._make_key(key), "-inf", f"({max_score}")
        return [m.decode("utf-8") if isinstance(m, bytes) else m for m in members]

    @contextmanager
    def distributed_lock(self, lock_name: str, timeout: int = 10, blocking_timeout: int = 5):
        """
        Distributed lock context manager using Redis.

        Args:
            lock_name: Name of the lock
            timeout: Lock timeout in seconds
            blocking_timeout: How long to wait for lock acquisition

        Yields:
            Lock object if acquired successfully

        Raises:
            LockError: If lock cannot be acquired
        """
        lock_key = self._make_key(f"lock:{lock_name}")
        lock = self.redis.lock(lock_key, timeout=timeout, blocking_timeout=blocking_timeout)

        if not lock.acquire(blocking=True, blocking_timeout=blocking_timeout):
            raise LockError(f"Could not acquire lock: {lock_name}")
        try:
            yield lock
        finally:
            try:
                lock.release()
            except LockError:
                # Lock may have expired, which is fine
                pass


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 max_connections: int = 20, decode_responses: bool = False,
                 password: Optional[str] = None, socket_timeout: Optional[float] = 5):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
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
            return self.client.ping()
        except RedisConnectionError:
            return False
