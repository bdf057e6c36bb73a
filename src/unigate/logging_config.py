"""
Centralized logging configuration for unigate.

Provides:
- Request ID context tracking via contextvars
- Formatter with aligned logger names and the current request ID
- Setup function for consistent logging across the application
"""

import logging
import secrets
import sys
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

LOGGER_NAME_WIDTH = 32


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access log lines for the health endpoint."""

    EXCLUDED_PATHS = {"/health", "/health/"}

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        for path in self.EXCLUDED_PATHS:
            if f"{path} " in message or message.endswith(path):
                return False
        return True


class GatewayFormatter(logging.Formatter):
    """``timestamp | LEVEL | [request id] logger | message``"""

    def format(self, record: logging.LogRecord) -> str:
        request_id = request_id_var.get()[:8].ljust(8)
        padded_name = record.name[:LOGGER_NAME_WIDTH].ljust(LOGGER_NAME_WIDTH)

        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        timestamp_with_ms = f"{timestamp}.{int(record.msecs):03d}"
        level_name = record.levelname[:5].ljust(5)

        log_line = f"{timestamp_with_ms} | {level_name} | [{request_id}] {padded_name} | {record.getMessage()}"

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            log_line = f"{log_line}\n{record.exc_text}"
        return log_line


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Should be called once at application startup.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(GatewayFormatter())

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    for logger_name in ["httpcore", "httpx", "asyncio", "sqlalchemy.engine"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    for uvicorn_logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(console_handler)
        uvicorn_logger.propagate = False

    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def generate_request_id() -> str:
    """An 8-character hex string."""
    return secrets.token_hex(4)
