"""Pydantic DTOs for the rover API, the analysis service and stored checkpoints."""
from __future__ import annotations

import json
from typing import Any

from pydantic import AliasChoices, AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator

from rover_service.domain.models import (
    AnalysisResult,
    Coordinate,
    DeviceStatus,
    OperationCheckpoint,
    OperationOutcome,
    TelemetrySample,
)


class RoverSubmissionDTO(BaseModel):
    """Body of ``POST /rover``; accepts the legacy rover field names too."""

    model_config = ConfigDict(populate_by_name=True)

    device_id: int = Field(validation_alias=AliasChoices("deviceId", "roverId"))
    sample_id: int = Field(validation_alias=AliasChoices("sampleId", "randomId"))
    battery_level: float = Field(
        validation_alias=AliasChoices("batteryLevel", "battery", "batteryStatus")
    )
    temperature: float = Field(validation_alias=AliasChoices("temperature", "temp"))
    humidity: float
    image_payload: Any = Field(
        default=None, validation_alias=AliasChoices("imagePayload", "image", "imageData")
    )

    @field_validator("image_payload")
    @classmethod
    def stringify_payload(cls, value: Any) -> str | None:
        # Non-string JSON payloads are forwarded in their JSON text form.
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value, separators=(",", ":"))

    def to_sample(self) -> TelemetrySample:
        return TelemetrySample(
            device_id=self.device_id,
            sample_id=self.sample_id,
            battery_level=self.battery_level,
            temperature=self.temperature,
            humidity=self.humidity,
            image_payload=self.image_payload,
        )


class CoordinateDTO(BaseModel):
    x: float
    y: float
    confidence: float

    def to_model(self) -> Coordinate:
        return Coordinate(x=self.x, y=self.y, confidence=self.confidence)


class AnalysisRequestDTO(BaseModel):
    image: str


class AnalysisResponseDTO(BaseModel):
    status: int
    image: str
    coordinates: list[CoordinateDTO] = Field(validation_alias=AliasChoices("coordinates", "imageResult"))

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            status=self.status,
            image=self.image,
            coordinates=tuple(c.to_model() for c in self.coordinates),
        )


class OperationOutcomeDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    outcome_code: int = Field(serialization_alias="outcomeCode")
    sample_id: str = Field(serialization_alias="sampleId")
    result_image: str = Field(serialization_alias="resultImage")
    coordinates: list[CoordinateDTO]
    url: str | None = None

    @classmethod
    def from_outcome(cls, outcome: OperationOutcome) -> OperationOutcomeDTO:
        return cls(
            outcome_code=int(outcome.outcome_code),
            sample_id=outcome.sample_id,
            result_image=outcome.result_image,
            coordinates=[CoordinateDTO(**c.to_dict()) for c in outcome.coordinates],
            url=outcome.url,
        )

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CheckpointDTO(BaseModel):
    """Wire and cache representation of an ``OperationCheckpoint``."""

    model_config = ConfigDict(populate_by_name=True)

    stage1: bool
    stage2: bool
    stage3: bool
    stage4: bool
    stage5: bool
    stage6: bool
    updated_at: str = Field(alias="updatedAt")
    last_error: str = Field(default="", alias="lastError")

    @classmethod
    def from_checkpoint(cls, checkpoint: OperationCheckpoint) -> CheckpointDTO:
        return cls(
            stage1=checkpoint.stage1,
            stage2=checkpoint.stage2,
            stage3=checkpoint.stage3,
            stage4=checkpoint.stage4,
            stage5=checkpoint.stage5,
            stage6=checkpoint.stage6,
            updated_at=checkpoint.updated_at,
            last_error=checkpoint.last_error,
        )

    def to_checkpoint(self) -> OperationCheckpoint:
        return OperationCheckpoint(
            stage1=self.stage1,
            stage2=self.stage2,
            stage3=self.stage3,
            stage4=self.stage4,
            stage5=self.stage5,
            stage6=self.stage6,
            updated_at=self.updated_at,
            last_error=self.last_error,
        )

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class OperationTestDTO(BaseModel):
    """Body of ``POST /rover/operations``."""

    id: str
    metadata: Any = None


class DeviceCreateDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    device_id: int = Field(validation_alias=AliasChoices("deviceId", "roverId"))
    status: DeviceStatus = DeviceStatus.ACTIVE


class DeviceStatusUpdateDTO(BaseModel):
    status: DeviceStatus


class AnalysisEndpointDTO(BaseModel):
    url: AnyHttpUrl
