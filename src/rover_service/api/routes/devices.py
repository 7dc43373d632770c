"""Rover management endpoints."""
from __future__ import annotations

from aiohttp import web

from rover_service.api.utils import history_page, history_window, parse_body, parse_rover_id
from rover_service.core.exceptions import RoverServiceError, handle_service_error
from rover_service.domain.dto import DeviceCreateDTO, DeviceStatusUpdateDTO
from rover_service.services.dependencies import get_rover_repository

routes = web.RouteTableDef()


@routes.post("/rover/devices")
async def create_device(request: web.Request) -> web.Response:
    dto = await parse_body(request, DeviceCreateDTO)

    repo = get_rover_repository(request)
    try:
        result = await repo.create_rover(dto.device_id, int(dto.status))
    except RoverServiceError as exc:
        return handle_service_error(request, exc)
    return web.json_response(
        {"deviceId": dto.device_id, "status": int(dto.status), "result": result},
        status=201,
    )


@routes.put("/rover/devices/{device_id}/status")
async def update_device_status(request: web.Request) -> web.Response:
    rover_id = parse_rover_id(request.match_info["device_id"])
    dto = await parse_body(request, DeviceStatusUpdateDTO)

    repo = get_rover_repository(request)
    try:
        result = await repo.update_status(rover_id, int(dto.status))
    except RoverServiceError as exc:
        return handle_service_error(request, exc)
    return web.json_response({"deviceId": rover_id, "status": int(dto.status), "result": result})


@routes.get("/rover/devices/{device_id}/history")
async def list_device_history(request: web.Request) -> web.Response:
    rover_id = parse_rover_id(request.match_info["device_id"])
    limit, offset = history_window(request)
    repo = get_rover_repository(request)
    try:
        records, total = await repo.list_operations(rover_id, limit=limit, offset=offset)
    except RoverServiceError as exc:
        return handle_service_error(request, exc)
    return web.json_response(
        history_page([r.to_dict() for r in records], total=total, limit=limit, offset=offset)
    )
