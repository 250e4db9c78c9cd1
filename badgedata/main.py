"""FastAPI application entrypoint for the badge data service."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, FastAPI
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from badgedata import grafana
from badgedata.config import Settings, get_settings
from badgedata.lib.logger import configure_logging, get_logger
from badgedata.registry import Registry

logger = get_logger(__name__)

# Starlette would default a method endpoint to GET; sources decide which methods they answer.
DISPATCH_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

system_router = APIRouter()


@system_router.get("/health", tags=["system"], summary="Health check")
async def health_check(request: Request) -> JSONResponse:
    """Return liveness response with the mounted routes."""

    sources = request.app.state.sources  # type: ignore[attr-defined]
    payload = {
        "ok": True,
        "data": {
            "status": "healthy",
            "routes": request.app.state.registry.names(),  # type: ignore[attr-defined]
            "cached_dashboards": len(sources[grafana.ROUTE_NAME].cache),
        },
    }
    return JSONResponse(content=payload)


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Assemble the data sources, seal the registry and mount the dispatcher.

    ``transport`` replaces the outbound HTTP transport of every data source.
    """

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Badge Data", version="0.1.0")
    registry = Registry()

    # Sources register in this order, before the registry is sealed below.
    app.state.sources = {
        grafana.ROUTE_NAME: grafana.setup(registry, settings, transport=transport),
    }
    app.state.settings = settings
    app.state.registry = registry

    dispatch = registry.build_handler()
    prefix = f"/{settings.route_prefix}"
    app.router.add_route(prefix, dispatch, methods=DISPATCH_METHODS, include_in_schema=False)
    app.router.add_route(prefix + "/{path:path}", dispatch, methods=DISPATCH_METHODS, include_in_schema=False)
    app.include_router(system_router)

    logger.info("app.ready", extra={"prefix": prefix, "routes": registry.names()})
    return app


app = create_app()
