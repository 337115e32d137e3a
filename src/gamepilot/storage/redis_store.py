"""
Redis-backed persistence store.
Stores every record as a JSON string under a prefixed per-user key.
"""

import json
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

import redis.asyncio as redis

from .base import PersistenceStore, page_sessions
from ..utils.exceptions import StoreError
from ..utils.logging import setup_logger


@dataclass
class RedisConfig:
    """Redis configuration"""
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    url: Optional[str] = None
    socket_timeout: int = 5
    socket_connect_timeout: int = 5
    decode_responses: bool = True

    @classmethod
    def from_store_config(cls, store_config) -> 'RedisConfig':
        return cls(
            host=store_config.redis_host,
            port=store_config.redis_port,
            db=store_config.redis_db,
            password=store_config.redis_password,
            url=store_config.redis_url,
            socket_timeout=store_config.socket_timeout
        )


class RedisConnectionManager:
    """Lazily creates and closes the asyncio Redis client"""

    def __init__(self, config: RedisConfig):
        self.config = config
        self.logger = setup_logger(__name__)
        self._client: Optional[redis.Redis] = None

    def get_client(self) -> redis.Redis:
        """Get the asyncio Redis client"""
        if self._client is None:
            if self.config.url:
                self._client = redis.Redis.from_url(
                    self.config.url,
                    socket_timeout=self.config.socket_timeout,
                    socket_connect_timeout=self.config.socket_connect_timeout,
                    decode_responses=self.config.decode_responses
                )
            else:
                self._client = redis.Redis(
                    host=self.config.host,
                    port=self.config.port,
                    db=self.config.db,
                    password=self.config.password,
                    socket_timeout=self.config.socket_timeout,
                    socket_connect_timeout=self.config.socket_connect_timeout,
                    decode_responses=self.config.decode_responses
                )
            self.logger.info(f"Created Redis client for {self.config.url or f'{self.config.host}:{self.config.port}'}")
        return self._client

    async def close(self):
        """Close the connection pool"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self.logger.info("Closed Redis connections")


class RedisStore(PersistenceStore):
    """PersistenceStore backed by Redis JSON strings"""

    def __init__(self, config: Optional[RedisConfig] = None, key_prefix: str = "gamepilot",
                 client: Optional[redis.Redis] = None):
        self.connection_manager = RedisConnectionManager(config or RedisConfig())
        self.key_prefix = key_prefix
        self.logger = setup_logger(__name__)
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is not None:
            return self._client
        return self.connection_manager.get_client()

    def _make_key(self, kind: str, user_id: str) -> str:
        """Create prefixed record key"""
        return f"{self.key_prefix}:{kind}:{user_id}"

    async def _get_json(self, key: str) -> Optional[Any]:
        try:
            raw_value = await self.client.get(key)
        except redis.RedisError as e:
            self.logger.error(f"Error reading key {key}: {e}")
            raise StoreError(f"Failed to read {key}", {'key': key}) from e
        if raw_value is None:
            return None
        return json.loads(raw_value)

    async def _set_json(self, key: str, value: Any):
        try:
            await self.client.set(key, json.dumps(value, default=str))
        except redis.RedisError as e:
            self.logger.error(f"Error writing key {key}: {e}")
            raise StoreError(f"Failed to write {key}", {'key': key}) from e

    # Seeding helpers

    async def set_user_games(self, user_id: str, games: List[Dict[str, Any]]):
        await self._set_json(self._make_key('games', user_id), games)

    async def set_session_history(self, user_id: str, sessions: List[Dict[str, Any]]):
        await self._set_json(self._make_key('sessions', user_id), sessions)

    # PersistenceStore

    async def get_user_games(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._get_json(self._make_key('games', user_id)) or []

    async def get_game_session_history(self, user_id: str, game_id: Optional[str] = None,
                                       limit: Optional[int] = None, offset: int = 0) -> List[Dict[str, Any]]:
        sessions = await self._get_json(self._make_key('sessions', user_id)) or []
        return page_sessions(sessions, game_id, limit, offset)

    async def get_persona(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._get_json(self._make_key('persona', user_id))

    async def create_persona(self, user_id: str, persona: Dict[str, Any]) -> None:
        await self._set_json(self._make_key('persona', user_id), persona)

    async def update_persona(self, user_id: str, persona: Dict[str, Any]) -> None:
        await self._set_json(self._make_key('persona', user_id), persona)

    async def delete_persona(self, user_id: str) -> bool:
        key = self._make_key('persona', user_id)
        try:
            return bool(await self.client.delete(key))
        except redis.RedisError as e:
            self.logger.error(f"Error deleting key {key}: {e}")
            raise StoreError(f"Failed to delete {key}", {'key': key}) from e

    async def get_mood_analysis(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._get_json(self._make_key('mood', user_id))

    async def save_mood_analysis(self, user_id: str, analysis: Dict[str, Any]) -> None:
        await self._set_json(self._make_key('mood', user_id), analysis)

    async def is_healthy(self) -> bool:
        """Ping the server"""
        try:
            return bool(await self.client.ping())
        except redis.RedisError as e:
            self.logger.warning(f"Redis health check failed: {e}")
            return False

    async def close(self):
        await self.connection_manager.close()
