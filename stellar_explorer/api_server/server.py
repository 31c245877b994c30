"""
FastAPI server: the Stellar explorer gateway.

create_app() wires settings, the shared upstream HTTP client (lifespan),
CORS, request logging, error rendering and the routers. Every error body is
JSON with at least a `message` field.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stellar_explorer import __version__
from stellar_explorer.config import Settings, get_settings
from stellar_explorer.core.exceptions import ExplorerError
from stellar_explorer.core.http import build_http_client
from stellar_explorer.explorer_logging import get_logger
from stellar_explorer.horizon.models import utc_now_iso
from stellar_explorer.api_server import contract_routes, horizon_routes, projects
from stellar_explorer.api_server.middleware import RequestLoggingMiddleware

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Lifespan: one shared upstream client per process
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    app.state.http_client = build_http_client(settings.upstream_timeout_sec)
    logger.info(
        "gateway_started",
        horizon=settings.horizon_mainnet_url,
        timeout_sec=settings.upstream_timeout_sec,
    )
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        logger.info("gateway_stopped")


# -----------------------------------------------------------------------------
# Error rendering
# -----------------------------------------------------------------------------


def explorer_error_handler(request: Request, exc: ExplorerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", status=exc.status_code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Invalid request parameters.", "errors": errors})


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={"message": "Route not found", "path": request.url.path, "method": request.method},
        )
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "timestamp": utc_now_iso()},
    )


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Stellar Explorer Gateway",
        description="Read-only gateway over Stellar Horizon, Soroban RPC and StellarExpert.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins) or ["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.add_exception_handler(ExplorerError, explorer_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        """Liveness probe."""
        return {
            "status": "OK",
            "timestamp": utc_now_iso(),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "stellar_horizon": settings.horizon_mainnet_url,
        }

    app.include_router(horizon_routes.router, prefix="/api")
    app.include_router(contract_routes.router, prefix="/api")
    app.include_router(projects.router, prefix="/api")
    return app


app = create_app()
