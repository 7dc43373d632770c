"""Rover repository: the named stored-procedure calls the service relies on."""
from __future__ import annotations

from typing import Any

from rover_service.core.exceptions import RepositoryError
from rover_service.domain.models import OperationRecord, TelemetrySample
from rover_service.repositories.base import BaseRepository

STORE_SUCCESS = "1"


def _column(row: Any, name: str) -> Any:
    """Return ``row[name]`` or None when the column is absent."""
    try:
        return row[name]
    except (KeyError, IndexError):
        return None


class RoverRepository(BaseRepository):
    """Repository for rover status and operation results."""

    async def get_status(self, rover_id: int) -> str:
        """Return the raw ``rover_status`` value for the rover."""
        row = await self._fetchrow("CALL get_rover($1, NULL)", rover_id)
        status = _column(row, "rover_status") if row is not None else None
        if status is None:
            raise RepositoryError("rover_status not found")
        return str(status)

    async def insert_operation_result(
        self,
        sample: TelemetrySample,
        *,
        image: str,
        coordinates_json: str,
    ) -> str | None:
        """Store one completed operation and return the procedure's result code."""
        row = await self._fetchrow(
            "CALL insert_one_operation($1, $2, $3::FLOAT, $4::FLOAT, $5::FLOAT, $6, $7, NULL)",
            sample.device_id,
            sample.sample_id,
            sample.battery_level,
            sample.temperature,
            sample.humidity,
            image,
            coordinates_json,
        )
        result = _column(row, "result") if row is not None else None
        return None if result is None else str(result)

    async def insert_test_operation(self, operation_id: str, metadata_json: str) -> str:
        """Store an ad-hoc operation record and return the stored id."""
        row = await self._fetchrow(
            "CALL insert_one_test($1::TEXT, $2::TEXT, NULL::TEXT)",
            operation_id,
            metadata_json,
        )
        result = _column(row, "result") if row is not None else None
        if result is None:
            raise RepositoryError("insert_one_test returned no result")
        return str(result)

    async def create_rover(self, rover_id: int, status: int) -> str | None:
        row = await self._fetchrow("CALL create_rover($1, $2, NULL)", rover_id, status)
        result = _column(row, "result") if row is not None else None
        return None if result is None else str(result)

    async def update_status(self, rover_id: int, status: int) -> str | None:
        row = await self._fetchrow("CALL update_rover_status($1, $2, NULL)", rover_id, status)
        result = _column(row, "result") if row is not None else None
        return None if result is None else str(result)

    async def list_operations(
        self, rover_id: int, *, limit: int = 50, offset: int = 0
    ) -> tuple[list[OperationRecord], int]:
        count_row = await self._fetchrow(
            "SELECT count(*) AS cnt FROM rover_operations WHERE rover_id = $1",
            rover_id,
        )
        total = int(count_row["cnt"]) if count_row else 0

        rows = await self._fetch(
            """
            SELECT id, rover_id, random_id, battery_status, temp, humidity,
                   image, coordinates, created_at
            FROM rover_operations
            WHERE rover_id = $1
            ORDER BY created_at DESC, id DESC
            LIMIT $2 OFFSET $3
            """,
            rover_id,
            limit,
            offset,
        )
        return [OperationRecord.from_row(dict(r)) for r in rows], total
