"""
Centralized Error Handling and Logging
Request tracing middleware, structured error logs and JSON error responses.
"""

import json
import logging
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

# Context variable for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

logger = logging.getLogger(__name__)


class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    SANITIZE_SENSITIVE_FIELDS = True
    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'key', 'secret', 'authorization',
        'auth', 'bearer', 'credential', 'cookie'
    ]

    LOG_REQUEST_BODIES = True
    LOG_CLIENT_ERRORS = True
    MAX_BODY_LOG_SIZE = 5000

    INCLUDE_TRACE_ID = True
    INCLUDE_TIMESTAMP = True

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Any) -> Any:
        """Recursively redact sensitive keys and truncate long strings"""
        if not cls.SANITIZE_SENSITIVE_FIELDS:
            return data

        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(str(key)) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        if isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        if isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        return data


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _captured_body(request: Request) -> Optional[Any]:
    """Body captured by RequestContextMiddleware, parsed as JSON when possible"""
    body = getattr(request.state, 'captured_body', None)
    if not body:
        return None
    try:
        text = body.decode('utf-8')
    except UnicodeDecodeError:
        return "DECODE_ERROR"
    try:
        return json.loads(text)
    except ValueError:
        return text


class StructuredLogger:
    """Structured JSON error logging with request context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True
    ) -> str:
        """Log one structured error entry and return its trace id"""
        trace_id = request_id_var.get('') or str(uuid.uuid4())[:8]

        log_entry: Dict[str, Any] = {
            "timestamp": _utc_timestamp(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": "ERROR"
        }

        if request is not None:
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "headers": ErrorHandlingConfig.sanitize_data(dict(request.headers)),
                "client_ip": request.client.host if request.client else None,
            }
            if ErrorHandlingConfig.LOG_REQUEST_BODIES:
                log_entry["request"]["body"] = ErrorHandlingConfig.sanitize_data(_captured_body(request))

        if exception is not None:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
            }
            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        logger.error(json.dumps(log_entry, indent=2, default=str))
        return trace_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a trace id per request and keep the body for error logs"""

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)

        body = None
        if ErrorHandlingConfig.LOG_REQUEST_BODIES:
            body = await request.body()

        request.state.captured_body = body
        request.state.trace_id = trace_id

        try:
            response = await call_next(request)
        except Exception as e:
            StructuredLogger.log_error(
                "unhandled_exception",
                f"Unhandled exception in request processing: {e}",
                request=request,
                exception=e
            )
            raise

        response.headers["X-Trace-ID"] = trace_id
        return response


def _error_response(status_code: int, content: Dict[str, Any], trace_id: Optional[str]) -> JSONResponse:
    if ErrorHandlingConfig.INCLUDE_TRACE_ID and trace_id:
        content["trace_id"] = trace_id
    if ErrorHandlingConfig.INCLUDE_TIMESTAMP:
        content["timestamp"] = _utc_timestamp()
    return JSONResponse(status_code=status_code, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions; 5xx always logged, 4xx when configured"""
    trace_id = None
    if exc.status_code >= 500 or ErrorHandlingConfig.LOG_CLIENT_ERRORS:
        trace_id = StructuredLogger.log_error(
            f"http_{exc.status_code}",
            f"HTTP {exc.status_code}: {exc.detail}",
            request=request,
            exception=exc,
            extra_context={"status_code": exc.status_code},
            include_traceback=exc.status_code >= 500
        )

    return _error_response(
        exc.status_code,
        {"error": f"HTTP {exc.status_code}", "message": exc.detail},
        trace_id
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors as HTTP 400"""
    validation_details = [
        {
            "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "unknown"),
        }
        for error in exc.errors()
    ]

    trace_id = StructuredLogger.log_error(
        "validation_error_400",
        f"Request validation failed: {len(validation_details)} validation errors",
        request=request,
        extra_context={"validation_errors": validation_details},
        include_traceback=False
    )

    return _error_response(
        400,
        {
            "error": "HTTP 400",
            "message": "Request validation failed",
            "detail": validation_details,
            "error_count": len(validation_details),
        },
        trace_id
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions without exposing internal details"""
    trace_id = StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {exc}",
        request=request,
        exception=exc
    )

    return _error_response(
        500,
        {"error": "Internal Server Error", "message": "An unexpected error occurred"},
        trace_id
    )


def setup_error_handling(app: FastAPI) -> None:
    """Install request tracing middleware and exception handlers"""
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling initialized")
