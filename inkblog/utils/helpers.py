from collections.abc import MutableMapping
from datetime import datetime, timedelta
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.routing import APIRoute
from pythonjsonlogger.json import JsonFormatter
from starlette.routing import BaseRoute, Match, Route

from inkblog.configs import settings

_FILE_HANDLER: RotatingFileHandler | None = None


def file_logger(logger: Logger) -> Logger:
    """
    Attach the shared JSON file handler to a logger when file logging is on.

    Args:
        logger: Logger to decorate.

    Returns:
        The same logger, for module-level assignment.
    """
    global _FILE_HANDLER  # noqa: PLW0603
    if not settings.LOG_TO_FILE:
        return logger

    if _FILE_HANDLER is None:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _FILE_HANDLER = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        _FILE_HANDLER.setFormatter(JsonFormatter())

    if _FILE_HANDLER not in logger.handlers:
        logger.addHandler(_FILE_HANDLER)
    return logger


def host(request: Request) -> str:
    """Return the host IP address."""
    return request.client.host if request.client else "unknown"


def today_str() -> str:
    """Return today's date as a string."""
    return datetime.now(datetime.now().astimezone().tzinfo).strftime(
        "%Y-%m-%d %H:%M:%S",
    )


def seconds_until_midnight(now: datetime | None = None) -> float:
    """Seconds from ``now`` (local time) until the next local midnight."""
    current = now or datetime.now().astimezone()
    tomorrow = (current + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    return (tomorrow - current).total_seconds()


def get_summary(request: Request) -> str | None:
    """Extract route summary from request."""

    scope: MutableMapping[str, Any] = request.scope
    app: FastAPI = scope["app"]
    routes: list[BaseRoute] = app.routes

    summary = None
    for route in routes:
        is_api_route = type(route) is APIRoute
        is_route = type(route) is Route
        if is_api_route and route.matches(scope)[0] == Match.FULL:
            summary = route.summary
            break
        if is_route and route.matches(scope)[0] == Match.FULL:
            summary = route.name
            break

    return summary
