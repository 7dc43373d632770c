"""Rover submission and status endpoints."""
from __future__ import annotations

import json
import time

from aiohttp import web

from rover_service.api.utils import parse_body, parse_rover_id
from rover_service.core.exceptions import (
    InvalidRequestError,
    RoverServiceError,
    SerializationError,
    StateStoreError,
    handle_service_error,
)
from rover_service.domain.dto import CheckpointDTO, OperationOutcomeDTO, OperationTestDTO, RoverSubmissionDTO
from rover_service.services.dependencies import get_coordinator, get_rover_repository

routes = web.RouteTableDef()


@routes.post("/rover")
async def submit_rover_data(request: web.Request) -> web.Response:
    """Run one rover submission; soft failures still answer 200."""
    dto = await parse_body(request, RoverSubmissionDTO)

    coordinator = get_coordinator(request)
    try:
        outcome = await coordinator.submit(dto.to_sample())
    except RoverServiceError as exc:
        return handle_service_error(request, exc)
    return web.json_response(OperationOutcomeDTO.from_outcome(outcome).to_json_dict())


async def rover_status(request: web.Request) -> web.Response:
    """Latest checkpoint recorded for a rover."""
    rover_id = parse_rover_id(request.match_info["device_id"])
    coordinator = get_coordinator(request)
    try:
        checkpoint = await coordinator.query_status(rover_id)
    except StateStoreError as exc:
        return web.json_response({"error": exc.message}, status=500)
    except RoverServiceError as exc:
        return handle_service_error(request, exc)
    return web.json_response(CheckpointDTO.from_checkpoint(checkpoint).to_json_dict())


routes.get("/rover/status/{device_id}")(rover_status)
routes.post("/rover/status/{device_id}")(rover_status)


@routes.post("/rover/operations")
async def insert_operation(request: web.Request) -> web.Response:
    """Store an ad-hoc operation record with free-form metadata."""
    dto = await parse_body(request, OperationTestDTO)

    try:
        if not dto.id:
            raise InvalidRequestError("Operation ID cannot be empty")
        try:
            metadata_json = json.dumps(dto.metadata, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Failed to serialize metadata: {exc}") from exc
        stored_id = await get_rover_repository(request).insert_test_operation(dto.id, metadata_json)
    except RoverServiceError as exc:
        return handle_service_error(request, exc)

    return web.json_response({"time": str(int(time.time())), "id": stored_id})
