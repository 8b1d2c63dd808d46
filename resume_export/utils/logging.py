"""Structured logging setup."""

import logging
import sys
import time
from typing import Any, cast
from urllib.parse import urlsplit

import structlog

from resume_export.config import settings

MAX_LOGGED_URL_LENGTH = 200


def setup_logging(level: str | None = None, debug: bool | None = None) -> None:
    """Configure structured logging for the application."""
    level = level or settings.log_level
    debug = settings.debug if debug is None else debug
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            (structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance for the given name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def sanitize_url(url: str | None) -> str | None:
    """
    Reduce a URL to something safe to write to logs.

    Keeps scheme, host, port and path. Credentials, query string and
    fragment are dropped, control characters are escaped and the result
    is truncated.
    """
    if url is None:
        return None

    try:
        parts = urlsplit(url)
        host = parts.hostname or ""
        port = f":{parts.port}" if parts.port else ""
    except ValueError:
        return "<unparseable url>"

    if parts.scheme and host:
        cleaned = f"{parts.scheme}://{host}{port}{parts.path}"
    else:
        cleaned = parts.path

    cleaned = cleaned.encode("unicode_escape").decode("ascii")
    if len(cleaned) > MAX_LOGGED_URL_LENGTH:
        cleaned = cleaned[:MAX_LOGGED_URL_LENGTH] + "..."
    return cleaned


class AccessLogMiddleware:
    """Middleware to log HTTP requests in access log format."""

    def __init__(self, app: Any) -> None:
        self.app = app
        self.logger = get_logger("access")

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        status_code = 0

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.time() - start_time) * 1000

            # Query strings may carry logo URLs; only the path is logged
            self.logger.info(
                "request",
                method=scope.get("method", "-"),
                path=scope.get("path", "-"),
                status=status_code,
                user_id=_header(scope, b"x-user-id"),
                duration_ms=round(duration_ms, 2),
            )


def _header(scope: dict[str, Any], name: bytes) -> str | None:
    for key, value in scope.get("headers", []):
        if key == name:
            return cast(bytes, value).decode("latin-1")
    return None
