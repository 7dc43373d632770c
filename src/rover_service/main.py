"""aiohttp application entrypoint."""
from __future__ import annotations

from aiohttp import web
from aiohttp_cors import ResourceOptions, setup as cors_setup

from rover_service.api.routes import config as config_routes
from rover_service.api.routes import devices as device_routes
from rover_service.api.routes import rover as rover_routes
from rover_service.core.logging_config import configure_logging
from rover_service.core.middleware import create_trace_middleware
from rover_service.services.dependencies import (
    OVERRIDES_KEY,
    SETTINGS_KEY,
    Overrides,
    resources_ctx,
)
from rover_service.settings import Settings, settings as default_settings

# Configure structured logging
configure_logging(default_settings.log_level, json_logs=default_settings.log_json)


async def healthcheck(request: web.Request) -> web.Response:
    settings = request.app[SETTINGS_KEY]
    return web.json_response({"status": "ok", "service": settings.app_name, "env": settings.env})


def create_app(settings: Settings | None = None, overrides: Overrides | None = None) -> web.Application:
    settings = settings or default_settings
    app = web.Application()
    app[SETTINGS_KEY] = settings
    app[OVERRIDES_KEY] = overrides or Overrides()

    app.middlewares.append(create_trace_middleware(settings.app_name))

    cors = cors_setup(
        app,
        defaults={
            origin: ResourceOptions(
                allow_credentials=True,
                expose_headers="*",
                allow_headers="*",
                allow_methods="*",
            )
            for origin in settings.cors_allowed_origins
        },
    )

    app.router.add_get("/health", healthcheck)
    app.add_routes(rover_routes.routes)
    app.add_routes(device_routes.routes)
    app.add_routes(config_routes.routes)

    app.cleanup_ctx.append(resources_ctx)

    for route in list(app.router.routes()):
        cors.add(route)

    return app


def main() -> None:
    web.run_app(
        create_app(),
        host=default_settings.host,
        port=default_settings.port,
        access_log=None,
    )


if __name__ == "__main__":
    main()
