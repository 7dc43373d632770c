"""Domain models."""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any

STAGE_COUNT = 6


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_rfc3339_z(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


class DeviceStatus(IntEnum):
    """Rover status held in the relational store."""

    ACTIVE = 1
    BLOCKED = 2
    SUSPENDED = 3

    @classmethod
    def parse(cls, raw: Any) -> DeviceStatus | None:
        """Return the known status for ``raw`` or None when it is unrecognized."""
        try:
            return cls(int(str(raw).strip()))
        except ValueError:
            return None

    @property
    def rejects_runs(self) -> bool:
        return self in (DeviceStatus.BLOCKED, DeviceStatus.SUSPENDED)


class OutcomeCode(IntEnum):
    """Closed set of outcome codes returned to the rover.

    Values 2 and 3 intentionally coincide with the matching ``DeviceStatus``
    codes; rovers already in the field depend on that.
    """

    SUCCESS = 1
    DEVICE_BLOCKED = 2
    DEVICE_SUSPENDED = 3
    PROCESSING_FAILED = 4

    @classmethod
    def for_rejected_status(cls, status: DeviceStatus) -> OutcomeCode:
        if status is DeviceStatus.BLOCKED:
            return cls.DEVICE_BLOCKED
        if status is DeviceStatus.SUSPENDED:
            return cls.DEVICE_SUSPENDED
        raise ValueError(f"Device status {status!r} does not reject runs")


@dataclass(frozen=True, slots=True)
class TelemetrySample:
    """One rover submission."""

    device_id: int
    sample_id: int
    battery_level: float
    temperature: float
    humidity: float
    image_payload: str | None = None


@dataclass(frozen=True, slots=True)
class Coordinate:
    x: float
    y: float
    confidence: float

    def to_dict(self) -> dict[str, float]:
        return {"x": float(self.x), "y": float(self.y), "confidence": float(self.confidence)}


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Parsed analysis service answer; coordinate order is preserved."""

    status: int
    image: str
    coordinates: tuple[Coordinate, ...] = ()

    def coordinates_json(self) -> str:
        """Canonical form stored alongside the operation row."""
        return json.dumps([c.to_dict() for c in self.coordinates], separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class OperationCheckpoint:
    """Per-rover progress record.

    Instances are immutable; ``advance`` and ``with_error`` return updated
    copies with a fresh ``updated_at``. ``advance(k)`` marks stages 1..k, so
    a stage flag never goes back to False within a run.
    """

    stage1: bool = True
    stage2: bool = False
    stage3: bool = False
    stage4: bool = False
    stage5: bool = False
    stage6: bool = False
    updated_at: str = field(default_factory=lambda: to_rfc3339_z(utc_now()))
    last_error: str = ""

    @classmethod
    def start(cls) -> OperationCheckpoint:
        return cls()

    @property
    def stages(self) -> tuple[bool, ...]:
        return tuple(getattr(self, f"stage{n}") for n in range(1, STAGE_COUNT + 1))

    @property
    def reached(self) -> int:
        """Highest stage marked True."""
        return max((n for n, done in enumerate(self.stages, start=1) if done), default=0)

    def advance(self, stage: int) -> OperationCheckpoint:
        if not 1 <= stage <= STAGE_COUNT:
            raise ValueError(f"stage must be within 1..{STAGE_COUNT}, got {stage}")
        flags = {f"stage{n}": True for n in range(1, stage + 1)}
        return replace(self, **flags, updated_at=to_rfc3339_z(utc_now()))

    def with_error(self, message: str) -> OperationCheckpoint:
        return replace(self, last_error=message, updated_at=to_rfc3339_z(utc_now()))


@dataclass(frozen=True, slots=True)
class OperationOutcome:
    """Synchronous answer to a submission."""

    outcome_code: OutcomeCode
    sample_id: str
    result_image: str = ""
    coordinates: tuple[Coordinate, ...] = ()
    url: str | None = None


@dataclass
class OperationRecord:
    """Stored operation row from the history listing."""

    id: int
    rover_id: int
    random_id: int
    battery_status: float
    temp: float
    humidity: float
    image: str
    coordinates: list[dict[str, Any]]
    created_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> OperationRecord:
        """Create OperationRecord from database row."""
        coordinates = row.get("coordinates") or "[]"
        if isinstance(coordinates, str):
            coordinates = json.loads(coordinates)
        return cls(
            id=row["id"],
            rover_id=row["rover_id"],
            random_id=row["random_id"],
            battery_status=row["battery_status"],
            temp=row["temp"],
            humidity=row["humidity"],
            image=row.get("image") or "",
            coordinates=coordinates,
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "deviceId": self.rover_id,
            "sampleId": self.random_id,
            "batteryLevel": self.battery_status,
            "temperature": self.temp,
            "humidity": self.humidity,
            "coordinates": self.coordinates,
            "createdAt": to_rfc3339_z(self.created_at),
        }
