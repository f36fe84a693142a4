"""
Logging setup for the recolor API.

Request-scoped code should log through ``middleware.logging_middleware.get_logger``
so every line carries the request id and, on project routes, the project id:

    from middleware.logging_middleware import get_logger
    logger = get_logger(__name__)
    logger.info("Inpainting cushion")  # -> "[a1b2c3d4][proj:5e6f7a8b] Inpainting cushion"
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

import structlog

from core.config import settings

LINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Libraries that log every HTTP call or SQL statement at INFO
NOISY_LOGGERS = (
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "replicate",
    "sqlalchemy.engine",
    "aiosqlite",
    "PIL",
    "multipart",
)


def _structlog_processors(log_format: str) -> List:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback))
    return processors


def _rotating_handler(path: Path, level: int, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None):
    """Configure structlog and the stdlib root logger. Safe to call more than once."""
    level_name = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format
    log_level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=_structlog_processors(log_format),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    # structlog already renders JSON lines; plain stdlib records get the pipe format
    console_handler.setFormatter(logging.Formatter("%(message)s" if log_format == "json" else LINE_FORMAT))
    root_logger.addHandler(console_handler)

    if settings.environment == "production":
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)
        root_logger.addHandler(_rotating_handler(log_dir / "recolor.log", logging.DEBUG, LINE_FORMAT))
        root_logger.addHandler(
            _rotating_handler(log_dir / "recolor_errors.log", logging.ERROR, LINE_FORMAT + "\n%(exc_info)s")
        )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={level_name}, format={log_format}, env={settings.environment}"
    )
