"""Redis client helpers."""
from __future__ import annotations

from redis import asyncio as aioredis


def create_client(redis_url: str, pool_size: int) -> aioredis.Redis:
    """Create a redis client backed by a bounded connection pool.

    Commands wait up to five seconds for a free connection instead of failing
    as soon as the pool is exhausted.
    """
    pool = aioredis.BlockingConnectionPool.from_url(
        redis_url,
        max_connections=pool_size,
        timeout=5,
        decode_responses=True,
    )
    return aioredis.Redis(connection_pool=pool)


async def close_client(client: aioredis.Redis) -> None:
    """Close the client and disconnect its pool."""
    await client.aclose()
    await client.connection_pool.disconnect()
