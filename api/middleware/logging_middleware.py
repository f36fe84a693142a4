"""
Per-request correlation ids for the recolor API.

Every request gets a short id, echoed back as ``X-Request-ID``. Requests under
``/api/projects/<id>`` also carry the project id so inference and ledger logs
can be grouped per project.
"""
import logging
import time
import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
project_id_var: ContextVar[str] = ContextVar("project_id", default="")

logger = logging.getLogger(__name__)

PROJECT_SEGMENT = "/projects/"


def get_request_id() -> str:
    return request_id_var.get()


def get_project_id() -> str:
    return project_id_var.get()


def project_id_from_path(path: str) -> str:
    """``/api/projects/abc/canvas`` -> ``abc``; empty for non-project routes"""
    if PROJECT_SEGMENT not in path:
        return ""
    return path.split(PROJECT_SEGMENT, 1)[1].split("/", 1)[0]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with correlation ids and logs its outcome and duration"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        project_id = project_id_from_path(request.url.path)

        request_id_var.set(request_id)
        project_id_var.set(project_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, project_id=project_id or None)

        context = {"request_id": request_id, "project_id": project_id, "method": request.method}
        started = time.perf_counter()
        logger.info(f"[{request_id}] → {request.method} {request.url.path}", extra={**context, "event": "request_start"})

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(
                f"[{request_id}] ✗ {type(e).__name__}: {str(e)[:100]} ({elapsed_ms:.0f}ms)",
                extra={**context, "event": "request_error", "duration_ms": elapsed_ms},
                exc_info=True,
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        # Provider failures come back as 500 responses rather than exceptions
        level = logging.INFO if response.status_code < 400 else logging.WARNING
        logger.log(
            level,
            f"[{request_id}] ← {response.status_code} ({elapsed_ms:.0f}ms)",
            extra={**context, "event": "request_end", "status_code": response.status_code, "duration_ms": elapsed_ms},
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed_ms / 1000:.3f}"
        return response


class ContextualLogger(logging.LoggerAdapter):
    """Prefixes messages with ``[request_id][proj:xxxxxxxx]`` when inside a request"""

    def process(self, msg, kwargs):
        prefix = ""
        request_id = get_request_id()
        project_id = get_project_id()
        if request_id:
            prefix = f"[{request_id}]"
        if project_id:
            prefix += f"[proj:{project_id[:8]}]"
        return (f"{prefix} {msg}" if prefix else msg), kwargs


def get_logger(name: str) -> ContextualLogger:
    return ContextualLogger(logging.getLogger(name), {})
