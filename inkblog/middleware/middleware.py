# inkblog/middleware/middleware.py
"""
Middleware components for the inkblog backend.

This module contains middleware for security headers, request logging
and CORS handling, plus the lifespan handler that creates the shared
clients on ``app.state`` and tears them down again.
"""

from asyncio import get_event_loop
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import DEBUG, INFO, WARNING, basicConfig, getLogger
from time import perf_counter

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from rich.logging import RichHandler
from rich.traceback import install
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from uvloop import Loop

from inkblog.clients.search_client import SearchClient
from inkblog.configs import BlogCacheConfig, settings
from inkblog.db import Database
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.view_counter import ViewCounter
from inkblog.services.scheduler import ViewCountFlusher, ViewCountScheduler
from inkblog.utils.helpers import file_logger, get_summary, host

# --- Logging Configuration ---
basicConfig(
    level=settings.LOG_LEVEL,
    format="%(message)s",
    datefmt="%X",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = file_logger(getLogger("rich"))

install()

SLOW_REQUEST_SECONDS = 1.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Manage application startup and shutdown events with service initialization."""
    logger.info(f"Starting {app.title}...")

    try:
        if settings.LOG_TO_FILE:
            logger.info(f"Logging to file enabled: {settings.LOG_FILE}")

        database = Database(settings)
        if settings.ENVIRONMENT == "development":
            await database.init_db()
        app.state.settings = settings
        app.state.database = database

        cache_manager = CacheManager()
        await cache_manager.initialize()
        app.state.cache_manager = cache_manager

        blog_cache_config = BlogCacheConfig()
        app.state.blog_cache_config = blog_cache_config

        search_client = SearchClient(settings)
        await search_client.ensure_index()
        app.state.search_client = search_client

        scheduler = ViewCountScheduler(
            ViewCountFlusher(database, ViewCounter(cache_manager, blog_cache_config.flush_lock_ttl)),
        )
        if settings.VIEW_COUNT_FLUSH_ENABLED:
            scheduler.start()
        app.state.scheduler = scheduler

        logger.info(f"is uvloop: {type(get_event_loop()) is Loop}")
        logger.info("Services initialized successfully")
        logger.info("  - API Documentation: http://localhost:8000/docs")
        logger.info("  - Health Check: http://localhost:8000/health")

    except Exception:
        logger.exception("Failed to initialize services")
        raise

    yield

    logger.info(f"Shutting down {app.title}...")

    try:
        await scheduler.stop()
        await search_client.close()
        await cache_manager.shutdown()
        await database.close()
        logger.info("Services cleaned up successfully")

    except Exception:
        logger.exception("Error during service cleanup")


def configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per request and one per response.

    Uploaded files are served at debug level; responses slower than
    ``SLOW_REQUEST_SECONDS`` or with a 5xx status are logged as warnings.
    The duration is also returned in the ``X-Process-Time`` header.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = perf_counter()
        path = request.url.path
        static = path.startswith(settings.UPLOAD_URL_PREFIX)
        route_info = get_summary(request) or f"{request.method} {path}"
        logger.log(DEBUG if static else INFO, f"Request: {route_info}, from ip: {host(request)}")

        response = await call_next(request)
        duration = perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{duration:.3f}"

        slow = duration > SLOW_REQUEST_SECONDS
        level = WARNING if slow or response.status_code >= 500 else DEBUG if static else INFO
        logger.log(
            level,
            f"Response: {response.status_code} for {request.method} {path} "
            f"in {duration:.3f}s{' (slow)' if slow else ''}",
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers; API responses carrying user data are never stored by caches."""

        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.headers.get("Authorization"):
            response.headers["Cache-Control"] = "no-store"
        return response
