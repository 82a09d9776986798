"""
Flowboard API

Thin FastAPI backend serving monday.com board data and workflow health
metrics to the dashboard.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import openai
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flowboard.config import get_settings
from flowboard.middleware import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from flowboard.routers import boards, columns, groups, items, workflow, workspaces
from flowboard.services.errors import (
    AnalysisError,
    AuthenticationError,
    BoardNotFoundError,
    GraphQLClientError,
    RateLimitExceeded,
    RequestTimeout,
)
from flowboard.services.http_client import close_shared_client
from flowboard.services.monday import get_executor

logger = logging.getLogger(__name__)

settings = get_settings()

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


def configure_logging(debug: bool = False) -> None:
    """Install a root handler whose lines carry the current request ID."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler.addFilter(RequestIDLogFilter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if debug else logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    configure_logging(settings.debug)
    if not settings.monday_api_token:
        logger.warning("MONDAY_API_TOKEN is not set; monday.com calls will fail")
    yield
    await close_shared_client()


app = FastAPI(
    title="Flowboard API",
    description="monday.com board data and workflow health metrics",
    version="0.1.0",
    lifespan=lifespan,
)

# Request ID (runs first — outermost middleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

# Routers
app.include_router(boards.router, prefix="/api/flowboard")
app.include_router(groups.router, prefix="/api/flowboard")
app.include_router(columns.router, prefix="/api/flowboard")
app.include_router(workspaces.router, prefix="/api/flowboard")
app.include_router(items.router, prefix="/api/flowboard")
app.include_router(workflow.router, prefix="/api/flowboard")


def _status_for(exc: GraphQLClientError) -> int:
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, RateLimitExceeded):
        return 429
    if isinstance(exc, RequestTimeout):
        return 504
    return 502


@app.exception_handler(GraphQLClientError)
async def graphql_error_handler(request: Request, exc: GraphQLClientError) -> JSONResponse:
    """Map client failures (already logged by the executor) to HTTP responses."""
    return JSONResponse(
        status_code=_status_for(exc),
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.exception_handler(BoardNotFoundError)
async def board_not_found_handler(request: Request, exc: BoardNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(AnalysisError)
@app.exception_handler(openai.APIError)
async def analysis_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"detail": "AI analysis unavailable", "error": type(exc).__name__},
    )


def _check_config() -> str:
    """Verify required configuration is loaded. Returns 'ok' or 'fail'."""
    s = get_settings()
    if s.monday_api_url and s.monday_api_token:
        return "ok"
    return "fail"


@app.get("/api/flowboard/health")
async def health_check() -> JSONResponse:
    """Health check reporting configuration and rate limiter state."""
    config_status = _check_config()
    overall = "ok" if config_status == "ok" else "degraded"
    if overall != "ok":
        logger.warning("Health check degraded — failed: config")

    result: dict[str, Any] = {
        "status": overall,
        "service": "flowboard-api",
        "version": "0.1.0",
        "checks": {"config": config_status},
        "rate_limiter": get_executor().limiter.counts(),
    }
    return JSONResponse(content=result, status_code=200)
