"""Request parsing helpers shared by the rover handlers."""
from __future__ import annotations

from typing import Any, TypeVar

from aiohttp import web
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

HISTORY_PAGE_SIZE = 50
HISTORY_PAGE_SIZE_MAX = 100


async def read_json(request: web.Request) -> dict[str, Any]:
    if not request.can_read_body:
        raise web.HTTPBadRequest(text="Request body is required")
    try:
        body = await request.json()
    except ValueError as exc:
        raise web.HTTPBadRequest(text="Request body is not valid JSON") from exc
    if not isinstance(body, dict):
        raise web.HTTPBadRequest(text="Request body must be a JSON object")
    return body


async def parse_body(request: web.Request, model: type[ModelT]) -> ModelT:
    """Read the JSON body and validate it into ``model``; 400 on failure."""
    body = await read_json(request)
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise web.HTTPBadRequest(text=exc.json(), content_type="application/json") from exc


def parse_rover_id(value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise web.HTTPBadRequest(text=f"Invalid deviceId: {value!r}") from exc


def history_window(request: web.Request) -> tuple[int, int]:
    """``(limit, offset)`` from the query string, clamped to sane bounds."""
    query = request.rel_url.query
    try:
        limit = int(query.get("limit", HISTORY_PAGE_SIZE))
        offset = int(query.get("offset", 0))
    except ValueError as exc:
        raise web.HTTPBadRequest(text="limit and offset must be integers") from exc
    limit = HISTORY_PAGE_SIZE if limit <= 0 else min(limit, HISTORY_PAGE_SIZE_MAX)
    return limit, max(offset, 0)


def history_page(operations: list[dict[str, Any]], *, total: int, limit: int, offset: int) -> dict[str, Any]:
    return {
        "operations": operations,
        "total": total,
        "page": offset // limit + 1,
        "page_size": limit,
    }
