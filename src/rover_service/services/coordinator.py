"""Operation coordinator: the checkpointed rover submission workflow.

A run moves through six checkpointed stages:

1. intake - checkpoint created, ``lastError`` cleared
2. analysis requested
3. analysis accepted
4. analysis response received
5. result persisted
6. run complete

The checkpoint for the rover is overwritten in the state store after every
stage so that ``query_status`` always shows the latest known state. Checkpoint
writes are advisory: a failed write is logged and the run continues. The
operation row written to the relational store is the authoritative record.

Failures in a backing store abort the run with ``UpstreamDependencyError``;
a rejected analysis request and a missing image are reported back to the
rover as outcome code 4 instead. Every failure seen after intake is also
written into the checkpoint's ``lastError``.
"""
from __future__ import annotations

from typing import Protocol

import structlog

from rover_service.core.exceptions import (
    AnalysisRejectedError,
    CheckpointNotFoundError,
    RoverServiceError,
)
from rover_service.domain.models import (
    AnalysisResult,
    DeviceStatus,
    OperationCheckpoint,
    OperationOutcome,
    OutcomeCode,
    TelemetrySample,
)
from rover_service.repositories.checkpoints import CheckpointRepository
from rover_service.repositories.rovers import STORE_SUCCESS
from rover_service.services.endpoint import AnalysisEndpointResolver
from rover_service.services.locks import KeyedLock

logger = structlog.get_logger(__name__)

PROCESSING_UNAVAILABLE_IMAGE = "Image Processing is not working"
MISSING_IMAGE_ERROR = "Image data is null"
STORE_FAILED_ERROR = "Error on storing DB"
STORE_NO_RESULT_ERROR = "Failed to retrieve result value"


class RoverStore(Protocol):
    async def get_status(self, rover_id: int) -> str: ...

    async def insert_operation_result(
        self, sample: TelemetrySample, *, image: str, coordinates_json: str
    ) -> str | None: ...


class ImageAnalyzer(Protocol):
    async def analyze(self, image: str, *, url: str) -> AnalysisResult: ...


class OperationCoordinator:
    """Runs submissions and answers status queries."""

    def __init__(
        self,
        rovers: RoverStore,
        checkpoints: CheckpointRepository,
        analyzer: ImageAnalyzer,
        endpoints: AnalysisEndpointResolver,
        *,
        redact_result_image: bool = True,
        expose_analysis_url: bool = False,
        locks: KeyedLock | None = None,
    ) -> None:
        self._rovers = rovers
        self._checkpoints = checkpoints
        self._analyzer = analyzer
        self._endpoints = endpoints
        self._redact_result_image = redact_result_image
        self._expose_analysis_url = expose_analysis_url
        self._locks = locks or KeyedLock()

    async def submit(self, sample: TelemetrySample) -> OperationOutcome:
        """Run the workflow for one sample.

        Submissions for the same rover are serialized; different rovers run
        concurrently.
        """
        async with self._locks.hold(sample.device_id):
            return await self._run(sample)

    async def query_status(self, rover_id: int) -> OperationCheckpoint:
        checkpoint = await self._checkpoints.get(rover_id)
        if checkpoint is None:
            raise CheckpointNotFoundError()
        return checkpoint

    async def _run(self, sample: TelemetrySample) -> OperationOutcome:
        log = logger.bind(device_id=sample.device_id, sample_id=sample.sample_id)
        log.info("run_started")

        checkpoint = OperationCheckpoint.start()
        await self._save(sample.device_id, checkpoint)

        try:
            raw_status = await self._rovers.get_status(sample.device_id)
        except RoverServiceError as exc:
            await self._fail(sample.device_id, checkpoint, exc)
            raise

        status = DeviceStatus.parse(raw_status)
        if status is not None and status.rejects_runs:
            log.info("rover_status_rejected", status=int(status))
            checkpoint = checkpoint.with_error(f"status is {int(status)}")
            await self._save(sample.device_id, checkpoint)
            return self._outcome(sample, OutcomeCode.for_rejected_status(status))
        if status is None:
            log.warning("rover_status_unrecognized", status=raw_status)

        if not sample.image_payload:
            log.info("image_payload_missing")
            checkpoint = checkpoint.advance(2).with_error(MISSING_IMAGE_ERROR)
            await self._save(sample.device_id, checkpoint)
            return self._outcome(sample, OutcomeCode.PROCESSING_FAILED)

        checkpoint = checkpoint.advance(2)
        await self._save(sample.device_id, checkpoint)

        url: str | None = None
        try:
            url = await self._endpoints.resolve()
            result = await self._analyzer.analyze(sample.image_payload, url=url)
        except AnalysisRejectedError as exc:
            log.warning("analysis_rejected", status=exc.status)
            checkpoint = checkpoint.with_error(exc.body)
            await self._save(sample.device_id, checkpoint)
            return self._outcome(
                sample,
                OutcomeCode.PROCESSING_FAILED,
                result_image=PROCESSING_UNAVAILABLE_IMAGE,
                url=url,
            )
        except RoverServiceError as exc:
            await self._fail(sample.device_id, checkpoint, exc)
            raise

        checkpoint = checkpoint.advance(3)
        await self._save(sample.device_id, checkpoint)
        checkpoint = checkpoint.advance(4)
        await self._save(sample.device_id, checkpoint)

        try:
            result_code = await self._rovers.insert_operation_result(
                sample,
                image=result.image,
                coordinates_json=result.coordinates_json(),
            )
        except RoverServiceError as exc:
            await self._fail(sample.device_id, checkpoint, exc)
            raise

        checkpoint = checkpoint.advance(5)
        await self._save(sample.device_id, checkpoint)

        # A non-success result code is recorded but the run still reports success.
        if result_code != STORE_SUCCESS:
            message = STORE_NO_RESULT_ERROR if result_code is None else STORE_FAILED_ERROR
            log.warning("result_store_inconsistent", result_code=result_code)
            checkpoint = checkpoint.with_error(message)

        checkpoint = checkpoint.advance(6)
        await self._save(sample.device_id, checkpoint)
        log.info("run_completed", coordinates=len(result.coordinates))

        return self._outcome(
            sample,
            OutcomeCode.SUCCESS,
            result_image="" if self._redact_result_image else result.image,
            coordinates=result.coordinates,
            url=url,
        )

    def _outcome(
        self,
        sample: TelemetrySample,
        code: OutcomeCode,
        *,
        result_image: str = "",
        coordinates: tuple = (),
        url: str | None = None,
    ) -> OperationOutcome:
        return OperationOutcome(
            outcome_code=code,
            sample_id=str(sample.sample_id),
            result_image=result_image,
            coordinates=tuple(coordinates),
            url=url if self._expose_analysis_url else None,
        )

    async def _save(self, rover_id: int, checkpoint: OperationCheckpoint) -> None:
        try:
            await self._checkpoints.save(rover_id, checkpoint)
        except RoverServiceError as exc:
            logger.warning(
                "checkpoint_write_failed",
                device_id=rover_id,
                stage=checkpoint.reached,
                error=str(exc),
            )

    async def _fail(
        self, rover_id: int, checkpoint: OperationCheckpoint, exc: RoverServiceError
    ) -> None:
        logger.warning(
            "run_failed",
            device_id=rover_id,
            stage=checkpoint.reached,
            error=str(exc),
        )
        await self._save(rover_id, checkpoint.with_error(str(exc)))
