"""Asyncpg connection pool helpers."""
from __future__ import annotations

import asyncpg  # type: ignore[import-untyped]


async def create_pool(database_url: str, pool_size: int) -> asyncpg.Pool:
    """Create an asyncpg pool."""
    return await asyncpg.create_pool(
        dsn=database_url,
        max_size=pool_size,
    )


async def close_pool(pool: asyncpg.Pool | None) -> None:
    """Close pool on shutdown."""
    if pool is not None:
        await pool.close()
