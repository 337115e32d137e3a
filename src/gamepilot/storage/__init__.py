"""
Storage Module

Persistence adapters for the mood and persona core:
- Abstract async record store interface
- In-memory store for tests and local runs
- Redis store for shared deployments
"""

from .base import PersistenceStore
from .memory_store import InMemoryStore
from .redis_store import RedisStore, RedisConfig


def create_store(store_config) -> PersistenceStore:
    """Build the store selected by a StoreConfig section"""
    if store_config.backend == 'redis':
        return RedisStore(RedisConfig.from_store_config(store_config), key_prefix=store_config.key_prefix)
    return InMemoryStore()


__all__ = [
    'PersistenceStore',
    'InMemoryStore',
    'RedisStore',
    'RedisConfig',
    'create_store'
]
