"""
Infrastructure Layer

Redis-backed metadata registry and object store implementations.
"""

from .local_object_store import LocalObjectStore
from .redis_object_registry import RedisObjectRegistry
from .redis_repository import RedisConnectionManager, RedisRepository
from .storage_factory import StorageFactory

__all__ = [
    "LocalObjectStore",
    "RedisConnectionManager",
    "RedisObjectRegistry",
    "RedisRepository",
    "StorageFactory",
]
