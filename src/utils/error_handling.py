"""
Centralized error handling and request tracing
Every request gets a trace id; failures are logged as structured JSON and
answered with a uniform error body. Nothing escapes a handler uncaught.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from contextvars import ContextVar

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

# Context variables for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
endpoint_context_var: ContextVar[str] = ContextVar('endpoint_context', default='')

logger = logging.getLogger(__name__)

class ErrorHandlingConfig:
    """Error handling behaviour switches"""

    LOG_REQUEST_BODIES = True
    MAX_BODY_LOG_SIZE = 5000
    INCLUDE_TRACE_ID = True
    INCLUDE_TIMESTAMP = True

    @classmethod
    def truncate(cls, body: Optional[str]) -> Optional[str]:
        if body and len(body) > cls.MAX_BODY_LOG_SIZE:
            return body[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        return body

def new_trace_id() -> str:
    return str(uuid.uuid4())[:8]

def captured_body(request: Request) -> Optional[str]:
    """Body stored by RequestContextMiddleware, decoded for logging"""
    body = getattr(request.state, 'captured_body', None)
    if not body:
        return None
    try:
        return ErrorHandlingConfig.truncate(body.decode('utf-8'))
    except UnicodeDecodeError:
        return "DECODE_ERROR"

class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict[str, Any]] = None,
        include_traceback: bool = True
    ) -> str:
        """Log a JSON error entry and return its trace id"""
        trace_id = request_id_var.get('') or new_trace_id()

        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": "ERROR"
        }

        if request:
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "client_ip": request.client.host if request.client else None,
            }

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
            }
            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = extra_context

        endpoint_context = endpoint_context_var.get('')
        if endpoint_context:
            log_entry["endpoint_context"] = endpoint_context

        logger.error(json.dumps(log_entry, indent=2, default=str))
        return trace_id

class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a trace id per request and keep the body for error logging"""

    async def dispatch(self, request: Request, call_next):
        trace_id = new_trace_id()
        request_id_var.set(trace_id)
        endpoint_context_var.set('')

        if ErrorHandlingConfig.LOG_REQUEST_BODIES and request.method in ("POST", "PUT", "PATCH"):
            request.state.captured_body = await request.body()
        request.state.trace_id = trace_id

        response = await call_next(request)
        response.headers["X-Trace-ID"] = trace_id
        return response

def _error_body(error: str, message: Any, trace_id: Optional[str]) -> Dict[str, Any]:
    content = {"error": error, "message": message}
    if ErrorHandlingConfig.INCLUDE_TRACE_ID and trace_id:
        content["trace_id"] = trace_id
    if ErrorHandlingConfig.INCLUDE_TIMESTAMP:
        content["timestamp"] = datetime.utcnow().isoformat()
    return content

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions, logging server-side failures"""
    trace_id = None
    if exc.status_code >= 500:
        trace_id = StructuredLogger.log_error(
            f"http_{exc.status_code}",
            f"HTTP {exc.status_code}: {exc.detail}",
            request=request,
            exception=exc,
            extra_context={"request_body": captured_body(request)},
            include_traceback=False
        )
    else:
        logger.info(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(f"HTTP {exc.status_code}", exc.detail, trace_id),
        headers=getattr(exc, "headers", None)
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors (HTTP 422)"""
    validation_details = [
        {
            "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "unknown"),
        }
        for error in exc.errors()
    ]
    logger.info(f"Validation failed on {request.method} {request.url.path}: {validation_details}")

    content = _error_body("Validation Error", "Request validation failed", request_id_var.get(''))
    content["detail"] = validation_details
    content["error_count"] = len(validation_details)
    return JSONResponse(status_code=422, content=content)

async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions without exposing internals"""
    trace_id = StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc,
        extra_context={"request_body": captured_body(request)},
    )
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal Server Error", "An unexpected error occurred", trace_id)
    )

def setup_error_handling(app):
    """Install tracing middleware and exception handlers on the app"""
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling initialized")

def set_endpoint_context(context: str):
    """Tag log entries of the current request with the endpoint name"""
    endpoint_context_var.set(context)
