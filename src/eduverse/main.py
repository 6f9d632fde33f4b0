"""Main entry point for the EduVerse application."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from eduverse.api.v1 import (
    chats_router,
    comments_router,
    courses_router,
    files_router,
    messages_router,
    metrics_router,
    posts_router,
    reactions_router,
    users_router,
)
from eduverse.core.settings import settings
from eduverse.db.session import create_tables
from eduverse.services.metrics import RequestMetric, get_metrics_sink

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    if settings.auto_create_tables:
        create_tables()
    logger.info("%s %s started", settings.app_name, settings.app_version)
    yield


# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Course-based social learning API",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)


def route_template(request: Request) -> str:
    """Return the matched route template including any router prefix.

    Depending on the framework version the matched route's ``path`` may or
    may not carry the prefix it was mounted under. The missing leading
    segments are taken from the concrete request path.
    """
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if not template:
        return request.url.path
    template_parts = template.strip("/").split("/")
    request_parts = request.url.path.strip("/").split("/")
    missing = len(request_parts) - len(template_parts)
    if missing <= 0:
        return template
    return "/" + "/".join(request_parts[:missing] + template_parts)


def _record_metric(request: Request, started: float, status_code: int) -> None:
    duration_ms = (time.perf_counter() - started) * 1000
    sink_factory = request.app.dependency_overrides.get(get_metrics_sink, get_metrics_sink)
    sink = sink_factory()
    metric = RequestMetric(
        method=request.method,
        path=route_template(request),
        duration_ms=duration_ms,
        status_code=status_code,
    )
    sink.record(metric)
    if sink.is_slow(metric):
        logger.warning(
            "Slow request: %s %s took %.1fms (status %d)",
            metric.method,
            metric.path,
            duration_ms,
            metric.status_code,
        )


@app.middleware("http")
async def record_request_metrics(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Time every request and feed the metrics sink, failed ones included."""
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        # The catch-all handler answers 500 outside this middleware.
        _record_metric(request, started, status.HTTP_500_INTERNAL_SERVER_ERROR)
        raise
    _record_metric(request, started, response.status_code)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed input as 400 with the first problem as ``detail``."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": f"{field}: {message}" if field else message,
            "errors": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
                for error in errors
            ],
        },
    )


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(_: Request, exc: IntegrityError) -> JSONResponse:
    """Map constraint violations that slipped past explicit checks to 409."""
    logger.warning("Integrity error: %s", exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Duplicate key error"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Include API routers
app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(courses_router, prefix=settings.api_prefix)
app.include_router(posts_router, prefix=settings.api_prefix)
app.include_router(comments_router, prefix=settings.api_prefix)
app.include_router(reactions_router, prefix=settings.api_prefix)
app.include_router(chats_router, prefix=settings.api_prefix)
app.include_router(messages_router, prefix=settings.api_prefix)
app.include_router(files_router, prefix=settings.api_prefix)
app.include_router(metrics_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Course-based social learning API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("eduverse.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
