"""
Redis Attempt Repository Implementation

Concrete Redis-based implementation of IAttemptRepository.
Counts failed password attempts with graceful degradation.
"""

import logging
from datetime import datetime, timedelta, timezone

import redis

from sharebox.domain.attempt_limiting.entities import AttemptState
from sharebox.domain.attempt_limiting.repositories import IAttemptRepository
from sharebox.domain.attempt_limiting.value_objects import AttemptLimit, ClientIP

logger = logging.getLogger(__name__)


class RedisAttemptRepository(IAttemptRepository):
    """
    Redis-based implementation of the attempt repository.

    The counter key is created with the window as its TTL on the first
    failure, so the window is fixed from that moment. When Redis is
    unavailable every client is treated as having no failures.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = "sharebox"):
        """
        Initialize with Redis client.

        Args:
            redis_client: Redis client instance
            key_prefix: Namespace for counter keys
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    def get_state(
        self, project_id: str, client_ip: ClientIP, limit: AttemptLimit
    ) -> AttemptState:
        try:
            key = self._make_key(project_id, client_ip)

            pipe = self.redis.pipeline()
            pipe.get(key)
            pipe.ttl(key)
            count_value, ttl_value = pipe.execute()

            failures = int(count_value) if count_value else 0
            return self._build_state(project_id, client_ip, limit, failures, ttl_value)

        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"Redis error in get_state: {e}")
            return self._create_clean_state(project_id, client_ip, limit)
        except Exception as e:
            logger.error(f"Unexpected error in get_state: {e}")
            return self._create_clean_state(project_id, client_ip, limit)

    def record_failure(
        self, project_id: str, client_ip: ClientIP, limit: AttemptLimit
    ) -> AttemptState:
        try:
            key = self._make_key(project_id, client_ip)

            # SET NX starts the window only on the first failure
            pipe = self.redis.pipeline()
            pipe.set(key, 0, ex=limit.window_seconds, nx=True)
            pipe.incr(key)
            pipe.ttl(key)
            _, failures, ttl_value = pipe.execute()

            return self._build_state(project_id, client_ip, limit, failures, ttl_value)

        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"Redis error in record_failure: {e}")
            return self._create_clean_state(project_id, client_ip, limit)
        except Exception as e:
            logger.error(f"Unexpected error in record_failure: {e}")
            return self._create_clean_state(project_id, client_ip, limit)

    def reset(self, project_id: str, client_ip: ClientIP) -> bool:
        try:
            return self.redis.delete(self._make_key(project_id, client_ip)) > 0
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"Redis error in reset: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error in reset: {e}")
            return False

    def _make_key(self, project_id: str, client_ip: ClientIP) -> str:
        """
        Generate Redis key for an attempt counter.

        Format: {prefix}:attempts:{project_id}:{ip_hash}
        """
        return f"{self.key_prefix}:attempts:{project_id}:{client_ip.hash_for_key()}"

    @staticmethod
    def _build_state(
        project_id: str, client_ip: ClientIP, limit: AttemptLimit, failures: int, ttl_value: int
    ) -> AttemptState:
        seconds = ttl_value if ttl_value and ttl_value > 0 else limit.window_seconds
        return AttemptState(
            project_id=project_id,
            client_ip=client_ip,
            failures=failures,
            limit=limit.max_attempts,
            reset_at=datetime.now(timezone.utc) + timedelta(seconds=seconds),
        )

    def _create_clean_state(
        self, project_id: str, client_ip: ClientIP, limit: AttemptLimit
    ) -> AttemptState:
        """State with zero failures, used when Redis cannot be reached."""
        return self._build_state(project_id, client_ip, limit, 0, limit.window_seconds)
