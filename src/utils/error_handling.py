"""
Centralized error handling and logging

Request tracing, structured error records for the log, and the JSON error
bodies returned by the posts and users API.
"""

import json
import logging
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

# Per-request tracing context
trace_id_var: ContextVar[str] = ContextVar('trace_id', default='')
endpoint_var: ContextVar[str] = ContextVar('endpoint', default='')

logger = logging.getLogger(__name__)

TRACE_HEADER = "X-Trace-ID"


class ErrorHandlingConfig:
    """Switches for what error logs and error bodies contain"""

    REDACT_PERSONAL_DATA = True
    # Matched as substrings of lower-cased keys
    REDACTED_KEYS = ('email', 'phone', 'password', 'token', 'secret', 'authorization', 'cookie')
    MAX_LOGGED_BODY = 2000

    INCLUDE_TRACE_ID = True
    INCLUDE_TIMESTAMP = True

    @classmethod
    def redact(cls, data: Any) -> Any:
        """Mask personal and credential values before they reach the log"""
        if not cls.REDACT_PERSONAL_DATA:
            return data
        if isinstance(data, dict):
            return {
                key: "***" if any(k in str(key).lower() for k in cls.REDACTED_KEYS) else cls.redact(value)
                for key, value in data.items()
            }
        if isinstance(data, list):
            return [cls.redact(item) for item in data]
        if isinstance(data, str) and len(data) > cls.MAX_LOGGED_BODY:
            return data[:cls.MAX_LOGGED_BODY] + "...[truncated]"
        return data


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_trace_id() -> str:
    return uuid.uuid4().hex[:8]


def _logged_body(request: Request) -> Any:
    """The JSON body read by the route, redacted; raw text when it did not parse"""
    raw = getattr(request.state, 'raw_body', None)
    if not raw:
        return None
    try:
        return ErrorHandlingConfig.redact(json.loads(raw))
    except ValueError:
        return ErrorHandlingConfig.redact(raw.decode('utf-8', errors='replace'))


class StructuredLogger:
    """Writes one JSON error record per failure"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[BaseException] = None,
        extra_context: Optional[Dict[str, Any]] = None,
        include_traceback: bool = True
    ) -> str:
        """
        Log a structured error record

        Returns:
            The trace id of the current request, or a fresh one outside a request
        """
        trace_id = trace_id_var.get() or new_trace_id()
        record: Dict[str, Any] = {
            "timestamp": _now_iso(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
        }

        endpoint = endpoint_var.get()
        if endpoint:
            record["endpoint"] = endpoint

        if request is not None:
            record["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query": dict(request.query_params),
                "body": _logged_body(request),
            }

        if exception is not None:
            record["exception"] = {"type": type(exception).__name__, "details": str(exception)}
            if include_traceback:
                record["exception"]["traceback"] = traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )

        if extra_context:
            record["context"] = ErrorHandlingConfig.redact(extra_context)

        logger.error(json.dumps(record, default=str))
        return trace_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns every request a trace id and echoes it in the response headers"""

    async def dispatch(self, request: Request, call_next):
        trace_id = new_trace_id()
        trace_id_var.set(trace_id)
        endpoint_var.set('')
        request.state.trace_id = trace_id

        try:
            response = await call_next(request)
        except Exception as e:
            StructuredLogger.log_error("unhandled_exception", str(e), request=request, exception=e)
            raise

        response.headers[TRACE_HEADER] = trace_id
        return response


# Response helpers for route handlers

def error_response(status_code: int, error: str, details: Optional[List[Dict[str, str]]] = None) -> JSONResponse:
    """{"error": ...}, with "details" when there are itemized field errors"""
    content: Dict[str, Any] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def validation_failed_response(result) -> JSONResponse:
    return error_response(400, "Validation failed", result.details())


async def read_json_body(request: Request) -> Tuple[Any, bool]:
    """
    Parse the request body as JSON

    Returns:
        (payload, True) on success, (None, False) when the body is not valid JSON
    """
    raw = await request.body()
    request.state.raw_body = raw
    try:
        return json.loads(raw), True
    except ValueError:
        logger.info(f"Rejected malformed JSON body on {request.url.path}")
        return None, False


def log_store_failure(request: Request, message: str, result) -> str:
    """Log a failed ServiceResult; clients only ever see the generic error"""
    return StructuredLogger.log_error(
        (result.error_type or "store_error").lower(),
        f"{message}: {result.error}",
        request=request,
        extra_context={"error_type": result.error_type},
        include_traceback=False
    )


# Global exception handlers

def _with_trace(content: Dict[str, Any], trace_id: Optional[str]) -> Dict[str, Any]:
    if ErrorHandlingConfig.INCLUDE_TRACE_ID and trace_id:
        content["trace_id"] = trace_id
    if ErrorHandlingConfig.INCLUDE_TIMESTAMP:
        content["timestamp"] = _now_iso()
    return content


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    trace_id = None
    if exc.status_code >= 500:
        trace_id = StructuredLogger.log_error(
            f"http_{exc.status_code}",
            str(exc.detail),
            request=request,
            include_traceback=False
        )

    content = _with_trace({"error": f"HTTP {exc.status_code}", "message": exc.detail}, trace_id)
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Query and path parameter errors use the same body as record validation"""
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        # drop the "query"/"path"/"body" prefix
        path = ".".join(loc[1:]) or ".".join(loc)
        details.append({"path": path, "message": error.get("msg", "Invalid value")})

    logger.info(f"Request validation failed on {request.url.path}: {len(details)} errors")
    return error_response(400, "Validation failed", details)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    trace_id = StructuredLogger.log_error("internal_server_error", str(exc), request=request, exception=exc)

    content = _with_trace({"error": "Internal Server Error", "message": "An unexpected error occurred"}, trace_id)
    return JSONResponse(status_code=500, content=content)


def setup_error_handling(app):
    """Install the trace-id middleware and the global exception handlers"""
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Error handling installed")


def set_endpoint_context(context: str):
    """Tag error records from the current request with the handling endpoint"""
    endpoint_var.set(context)
