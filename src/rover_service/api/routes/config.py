"""Analysis endpoint administration."""
from __future__ import annotations

from aiohttp import web

from rover_service.api.utils import parse_body
from rover_service.core.exceptions import RoverServiceError, handle_service_error
from rover_service.domain.dto import AnalysisEndpointDTO
from rover_service.services.dependencies import get_endpoint_resolver

routes = web.RouteTableDef()

ENDPOINT_PATH = "/rover/config/analysis-endpoint"


@routes.get(ENDPOINT_PATH)
async def get_analysis_endpoint(request: web.Request) -> web.Response:
    resolver = get_endpoint_resolver(request)
    try:
        url, source = await resolver.describe()
    except RoverServiceError as exc:
        return handle_service_error(request, exc)
    return web.json_response({"url": url, "source": source})


@routes.put(ENDPOINT_PATH)
async def set_analysis_endpoint(request: web.Request) -> web.Response:
    dto = await parse_body(request, AnalysisEndpointDTO)

    resolver = get_endpoint_resolver(request)
    try:
        await resolver.update(str(dto.url))
    except RoverServiceError as exc:
        return handle_service_error(request, exc)
    return web.json_response({"url": str(dto.url), "source": "override"})


@routes.delete(ENDPOINT_PATH)
async def reset_analysis_endpoint(request: web.Request) -> web.Response:
    resolver = get_endpoint_resolver(request)
    try:
        await resolver.reset()
        url, source = await resolver.describe()
    except RoverServiceError as exc:
        return handle_service_error(request, exc)
    return web.json_response({"url": url, "source": source})
