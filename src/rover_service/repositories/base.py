"""Base repository over an asyncpg pool."""
from __future__ import annotations

from typing import Any

import asyncpg  # type: ignore[import-untyped]

from rover_service.core.exceptions import RepositoryError

# Driver and connectivity failures are not told apart: callers only see RepositoryError.
_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class BaseRepository:
    """Thin helpers that translate driver failures into ``RepositoryError``."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def _fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        try:
            return await self._pool.fetchrow(query, *args)
        except _DB_ERRORS as exc:
            raise RepositoryError(f"Database query failed: {exc}") from exc

    async def _fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        try:
            return await self._pool.fetch(query, *args)
        except _DB_ERRORS as exc:
            raise RepositoryError(f"Database query failed: {exc}") from exc
