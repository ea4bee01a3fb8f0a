"""Global exception handlers.

Maps request-validation failures to 400 with a readable message and any
downstream or unexpected failure to a logged 500.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)


class DownstreamServiceError(Exception):
    """Storage, search or crypto backend failed while serving a request."""

    def __init__(self, service: str, message: str, status_code: int = None):
        self.service = service
        self.message = message
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


def _format_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")
        )
        msg = error.get("msg", "Invalid value")
        messages.append(f"{location}: {msg}" if location else msg)
    return "; ".join(messages) or "Invalid request"


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": _format_validation_error(exc)},
    )


async def downstream_exception_handler(
    request: Request, exc: DownstreamServiceError
) -> JSONResponse:
    logger.error(
        "Downstream service failure",
        extra={"extra_fields": {
            "service": exc.service,
            "error": exc.message,
            "upstream_status": exc.status_code,
        }},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": f"{exc.service} is unavailable, please retry",
            "request_id": get_request_id(),
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def add_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DownstreamServiceError, downstream_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
