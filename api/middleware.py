"""
Request middleware for the SITEPLAN API.

Every request gets a correlation id (X-Request-ID), one JSON log line with
its timing, and a sanitized JSON body if the core raises something
unexpected. Geometry requests can be CPU-heavy on large parcels, so slow
requests are logged at WARNING.
"""
import json
import logging
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied ids longer than this are replaced
MAX_REQUEST_ID_LENGTH = 128

# Requests slower than this are logged at WARNING
SLOW_REQUEST_MS = 1000.0

INTERNAL_ERROR_MESSAGE = "내부 오류가 발생했습니다. 요청 ID와 함께 문의해 주세요."

_request_id: ContextVar[Optional[str]] = ContextVar("siteplan_request_id", default=None)


def get_request_id() -> Optional[str]:
    """Correlation id of the request being handled, if any."""
    return _request_id.get()


class StructuredLogger:
    """
    One JSON object per log line.

    Each record carries timestamp, level, message, service and the current
    request id; keyword arguments are merged in and None values dropped.
    Korean text is written as-is.
    """

    def __init__(self, name: str, service: str = "siteplan-api"):
        self.logger = logging.getLogger(name)
        self.service = service

    def record(self, level: str, message: str, **fields: Any) -> Dict[str, Any]:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "message": message,
            "service": self.service,
            "request_id": get_request_id(),
        }
        entry.update(fields)
        return {k: v for k, v in entry.items() if v is not None}

    def log(self, level: str, message: str, **fields: Any):
        numeric = logging.getLevelName(level)
        if not self.logger.isEnabledFor(numeric):
            return
        self.logger.log(numeric, json.dumps(self.record(level, message, **fields), ensure_ascii=False))

    def debug(self, message: str, **fields: Any):
        self.log("DEBUG", message, **fields)

    def info(self, message: str, **fields: Any):
        self.log("INFO", message, **fields)

    def warning(self, message: str, **fields: Any):
        self.log("WARNING", message, **fields)

    def error(self, message: str, **fields: Any):
        self.log("ERROR", message, **fields)


structured_logger = StructuredLogger("siteplan.api")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Bind a correlation id to the request context.

    A client-supplied X-Request-ID is reused when it is non-empty and at
    most MAX_REQUEST_ID_LENGTH characters; otherwise a UUID4 is issued.
    The id is echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
        if not incoming or len(incoming) > MAX_REQUEST_ID_LENGTH:
            incoming = str(uuid.uuid4())

        token = _request_id.set(incoming)
        try:
            response = await call_next(request)
        finally:
            _request_id.reset(token)
        response.headers[REQUEST_ID_HEADER] = incoming
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and elapsed milliseconds per request."""

    # Liveness probes are not logged
    SKIP_PATHS = frozenset({"/api/health"})

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        level = "WARNING" if elapsed_ms > SLOW_REQUEST_MS else "INFO"
        structured_logger.log(
            level,
            "Slow request" if level == "WARNING" else "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=elapsed_ms,
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Turn uncaught exceptions into a 500 JSON body.

    The exception is logged in full; the client sees a generic Korean
    message and the request id, or the exception text when debug is on.
    Domain input errors never reach this point, they are mapped to 400 by
    the application's exception handlers.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            structured_logger.error(
                "Unhandled exception",
                method=request.method,
                path=request.url.path,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            logging.getLogger(__name__).debug("Traceback", exc_info=exc)
            return JSONResponse(
                status_code=500,
                content={
                    "error": INTERNAL_ERROR_MESSAGE,
                    "detail": str(exc) if self.debug else None,
                    "request_id": get_request_id(),
                },
            )


def setup_middleware(app: FastAPI, debug: bool = False):
    """
    Install the request middleware stack.

    Starlette runs middleware in reverse order of registration, so the
    request id is bound before logging and error handling run inside it.
    """
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
