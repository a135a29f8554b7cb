"""
Logging setup for the Visnet E-Learning API.
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .config import settings


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("elearning.requests")


def setup_logging() -> None:
    """Configure root logging once from LOG_LEVEL."""
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)

    # SQL echo is handled by the engine itself in debug mode
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class RequestLoggingMiddleware:
    """Log method, path, status and duration of every HTTP request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{scope.get('method')} {scope.get('path')} {status_code} {elapsed_ms:.1f}ms"
            )
