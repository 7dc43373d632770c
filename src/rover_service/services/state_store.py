"""Key/value state store used for checkpoints and runtime configuration."""
from __future__ import annotations

from typing import Protocol

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from rover_service.core.exceptions import StateStoreError


class StateStore(Protocol):
    """Opaque string values, unconditional overwrites, no transactions."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, *, ttl: int | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...


class RedisStateStore:
    """``StateStore`` over a pooled redis client.

    The client is shared by all requests; the connection pool hands out one
    connection per in-flight command.
    """

    def __init__(self, client: aioredis.Redis):
        self._client = client

    async def get(self, key: str) -> str | None:
        try:
            value = await self._client.get(key)
        except RedisError as exc:
            raise StateStoreError(f"Cache read failed: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise StateStoreError(f"Cache value for {key!r} is not valid UTF-8") from exc
        return value

    async def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        try:
            await self._client.set(key, value, ex=ttl)
        except RedisError as exc:
            raise StateStoreError(f"Cache write failed: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as exc:
            raise StateStoreError(f"Cache delete failed: {exc}") from exc
