from middleware.logging_middleware import (
    ContextualLogger,
    RequestLoggingMiddleware,
    get_logger,
    get_project_id,
    get_request_id,
    project_id_from_path,
)

__all__ = [
    "ContextualLogger",
    "RequestLoggingMiddleware",
    "get_logger",
    "get_project_id",
    "get_request_id",
    "project_id_from_path",
]
