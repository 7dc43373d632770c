"""In-memory doubles for the service's collaborators."""
from __future__ import annotations

import json
from typing import Any

from rover_service.core.exceptions import AnalysisRejectedError, RepositoryError, StateStoreError
from rover_service.domain.models import AnalysisResult, Coordinate, OperationRecord, TelemetrySample


class InMemoryStateStore:
    """Dict-backed ``StateStore`` that remembers every write."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.writes: list[tuple[str, str]] = []
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StateStoreError("Cache read failed: connection refused")
        return self.data.get(key)

    async def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        if self.fail_writes:
            raise StateStoreError("Cache write failed: connection refused")
        self.data[key] = value
        self.ttls[key] = ttl
        self.writes.append((key, value))

    async def delete(self, key: str) -> None:
        if self.fail_writes:
            raise StateStoreError("Cache delete failed: connection refused")
        self.data.pop(key, None)

    def checkpoints(self, key: str) -> list[dict[str, Any]]:
        return [json.loads(value) for k, value in self.writes if k == key]


class FakeRoverRepository:
    """Stands in for ``RoverRepository``."""

    def __init__(self, statuses: dict[int, str] | None = None, result_code: str | None = "1") -> None:
        self.statuses = statuses or {}
        self.result_code = result_code
        self.status_error: Exception | None = None
        self.insert_error: Exception | None = None
        self.inserted: list[dict[str, Any]] = []
        self.tests: list[tuple[str, str]] = []
        self.created: list[tuple[int, int]] = []
        self.history: list[OperationRecord] = []

    async def get_status(self, rover_id: int) -> str:
        if self.status_error is not None:
            raise self.status_error
        if rover_id not in self.statuses:
            raise RepositoryError("rover_status not found")
        return self.statuses[rover_id]

    async def insert_operation_result(
        self, sample: TelemetrySample, *, image: str, coordinates_json: str
    ) -> str | None:
        if self.insert_error is not None:
            raise self.insert_error
        self.inserted.append({"sample": sample, "image": image, "coordinates_json": coordinates_json})
        return self.result_code

    async def insert_test_operation(self, operation_id: str, metadata_json: str) -> str:
        self.tests.append((operation_id, metadata_json))
        return operation_id

    async def create_rover(self, rover_id: int, status: int) -> str | None:
        self.created.append((rover_id, status))
        self.statuses[rover_id] = str(status)
        return "1"

    async def update_status(self, rover_id: int, status: int) -> str | None:
        if rover_id not in self.statuses:
            return "0"
        self.statuses[rover_id] = str(status)
        return "1"

    async def list_operations(
        self, rover_id: int, *, limit: int = 50, offset: int = 0
    ) -> tuple[list[OperationRecord], int]:
        records = [r for r in self.history if r.rover_id == rover_id]
        return records[offset : offset + limit], len(records)


class FakeAnalyzer:
    """Stands in for ``AnalysisServiceClient``."""

    def __init__(self, result: AnalysisResult | None = None) -> None:
        self.result = result or AnalysisResult(
            status=1,
            image="out",
            coordinates=(Coordinate(x=100, y=500, confidence=0.5),),
        )
        self.error: Exception | None = None
        self.calls: list[tuple[str, str]] = []
        self.on_call = None

    async def analyze(self, image: str, *, url: str) -> AnalysisResult:
        self.calls.append((image, url))
        if self.on_call is not None:
            await self.on_call()
        if self.error is not None:
            raise self.error
        return self.result

    def reject(self, status: int = 500, body: str = "model offline") -> None:
        self.error = AnalysisRejectedError(status, body)

    async def aclose(self) -> None:
        return None


def make_sample(**overrides: Any) -> TelemetrySample:
    values: dict[str, Any] = {
        "device_id": 42,
        "sample_id": 9001,
        "battery_level": 3.7,
        "temperature": 21.5,
        "humidity": 40.0,
        "image_payload": "b64payload",
    }
    values.update(overrides)
    return TelemetrySample(**values)
