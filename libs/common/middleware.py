"""Observability middleware shared by every service app.

Each request gets an X-Request-ID (propagated when the caller sends one),
a start/finish log line with duration, and a logged traceback when the
handler raises.
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

QUIET_PATHS = ("/health",)
# Image proxy hits are frequent and cached by clients; log them at debug.
QUIET_PREFIXES = ("/media/images/",)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Sets request context for tracing and logs the request lifecycle."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=path,
            method=request.method,
        )
        quiet = path in QUIET_PATHS
        chatty = request.method == "GET" and path.startswith(QUIET_PREFIXES)

        start_time = time.perf_counter()
        if not quiet and not chatty:
            logger.info(
                "Request started",
                extra={"extra_fields": {"query": str(request.url.query) or None}},
            )

        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

            if not quiet:
                if response.status_code >= 400:
                    log = logger.warning
                elif chatty:
                    log = logger.debug
                else:
                    log = logger.info
                log(
                    "Request completed",
                    extra={"extra_fields": {
                        "status_code": response.status_code,
                        "duration_ms": duration_ms,
                    }},
                )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.exception(
                "Request failed with unhandled exception",
                extra={"extra_fields": {"error": str(e), "duration_ms": duration_ms}},
            )
            raise

        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """
    Configure logging and install the request context middleware.
    """
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
