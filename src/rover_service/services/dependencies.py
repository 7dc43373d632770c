"""Application resources and their lifecycle."""
from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import structlog
from aiohttp import web

from rover_service.db import pool as db_pool
from rover_service.db import redis as db_redis
from rover_service.repositories.checkpoints import CheckpointRepository
from rover_service.repositories.rovers import RoverRepository
from rover_service.services.analysis_client import AnalysisServiceClient
from rover_service.services.coordinator import OperationCoordinator
from rover_service.services.endpoint import AnalysisEndpointResolver
from rover_service.services.state_store import RedisStateStore, StateStore
from rover_service.settings import Settings

logger = structlog.get_logger(__name__)


@dataclass
class Overrides:
    """Pre-built collaborators; anything left as None is created from settings."""

    rover_repo: RoverRepository | None = None
    state_store: StateStore | None = None
    analysis_client: AnalysisServiceClient | None = None


@dataclass
class Resources:
    rover_repo: RoverRepository
    endpoints: AnalysisEndpointResolver
    coordinator: OperationCoordinator
    closers: list = field(default_factory=list)


SETTINGS_KEY = web.AppKey("settings", Settings)
OVERRIDES_KEY = web.AppKey("overrides", Overrides)
RESOURCES_KEY = web.AppKey("resources", Resources)


async def resources_ctx(app: web.Application) -> AsyncIterator[None]:
    """aiohttp cleanup context: open connections on startup, close them on shutdown."""
    settings = app[SETTINGS_KEY]
    overrides = app[OVERRIDES_KEY]
    closers = []

    rover_repo = overrides.rover_repo
    if rover_repo is None:
        pool = await db_pool.create_pool(str(settings.database_url), settings.db_pool_size)
        closers.append(lambda: db_pool.close_pool(pool))
        rover_repo = RoverRepository(pool)

    state_store = overrides.state_store
    if state_store is None:
        client = db_redis.create_client(settings.redis_url, settings.redis_pool_size)
        closers.append(lambda: db_redis.close_client(client))
        state_store = RedisStateStore(client)

    analysis_client = overrides.analysis_client
    if analysis_client is None:
        analysis_client = AnalysisServiceClient(
            timeout_s=settings.analysis_timeout_s,
            max_concurrency=settings.analysis_max_concurrency,
        )
        closers.append(analysis_client.aclose)

    endpoints = AnalysisEndpointResolver(
        str(settings.analysis_service_url),
        state_store=state_store,
        key=settings.analysis_url_key,
    )
    coordinator = OperationCoordinator(
        rover_repo,
        CheckpointRepository(state_store, ttl_seconds=settings.checkpoint_ttl_sec),
        analysis_client,
        endpoints,
        redact_result_image=settings.redact_result_image,
        expose_analysis_url=settings.expose_analysis_url,
    )
    app[RESOURCES_KEY] = Resources(
        rover_repo=rover_repo,
        endpoints=endpoints,
        coordinator=coordinator,
        closers=closers,
    )
    logger.info("resources_ready", created=len(closers))

    yield

    for close in reversed(closers):
        await close()


def get_coordinator(request: web.Request) -> OperationCoordinator:
    return request.app[RESOURCES_KEY].coordinator


def get_rover_repository(request: web.Request) -> RoverRepository:
    return request.app[RESOURCES_KEY].rover_repo


def get_endpoint_resolver(request: web.Request) -> AnalysisEndpointResolver:
    return request.app[RESOURCES_KEY].endpoints
