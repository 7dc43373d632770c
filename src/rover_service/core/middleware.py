"""Request tracing middleware."""
from __future__ import annotations

from typing import Awaitable, Callable
from uuid import uuid4

import structlog
from aiohttp import web

REQUEST_ID_HEADER = "X-Request-ID"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

logger = structlog.get_logger(__name__)


def create_trace_middleware(service_name: str):
    """Bind a request id into structlog context and echo it back to the caller."""

    @web.middleware
    async def trace_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            service=service_name,
            method=request.method,
            path=request.path,
        )
        try:
            response = await handler(request)
        except web.HTTPException as exc:
            exc.headers[REQUEST_ID_HEADER] = request_id
            logger.info("request_completed", status=exc.status)
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info("request_completed", status=response.status)
        return response

    return trace_middleware
