"""
Infrastructure Layer

Redis repositories, blob stores and the password hasher.
"""

from .gcs_blob_store import GCSBlobStore
from .local_blob_store import LocalBlobStore
from .password_hasher import WerkzeugPasswordHasher
from .redis_attempt_repository import RedisAttemptRepository
from .redis_project_repository import RedisProjectRepository
from .redis_repository import RedisConnectionManager, RedisRepository
from .redis_text_room_repository import RedisTextRoomRepository
from .storage_factory import StorageFactory

__all__ = [
    "GCSBlobStore",
    "LocalBlobStore",
    "RedisAttemptRepository",
    "RedisConnectionManager",
    "RedisProjectRepository",
    "RedisRepository",
    "RedisTextRoomRepository",
    "StorageFactory",
    "WerkzeugPasswordHasher",
]
