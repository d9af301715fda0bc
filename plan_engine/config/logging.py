"""
Plan Engine - Logging Configuration

Structured logging with JSON support.
"""

import logging
import sys
import json
import os
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pathlib import Path


ROOT_LOGGER_NAME = "plan_engine"

# Set per HTTP request by the API middleware
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logs"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        if hasattr(record, "extra_data"):
            log_data["data"] = record.extra_data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for the console"""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Color a copy, other handlers see the same record
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR
        json_logs: Use JSON format (production)
        log_file: Optional log file path

    Returns:
        Configured logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    if json_logs:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """Adapter adding bound context to log records"""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get("extra", {})
        if self.extra:
            data = dict(self.extra)
            data.update(extra.get("extra_data", {}))
            extra["extra_data"] = data
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger with bound context

    Args:
        name: Logger name, e.g. "executor.engine"
        **context: Bound context (plan_id, request_id, ...)

    Returns:
        Logger with context
    """
    base_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return LoggerAdapter(base_logger, context)


# === Logging helpers ===

def log_step_event(
    logger: logging.LoggerAdapter,
    plan_id: str,
    step,
    event: str,
    **extra
):
    """Log a step lifecycle event"""
    logger.info(
        f"Plan {plan_id} step {step.id} ({step.type_name}) {event}",
        extra={"extra_data": {
            "plan_id": plan_id,
            "step_id": step.id,
            "step_type": step.type_name,
            "event": event,
            "duration_ms": step.duration,
            **extra
        }}
    )


def log_error(
    logger: logging.LoggerAdapter,
    error: BaseException,
    context: str = "",
    **extra
):
    """Log an error with its traceback"""
    logger.error(
        f"Error in {context}: {type(error).__name__}: {str(error)}",
        exc_info=error,
        extra={"extra_data": extra}
    )


DEBUG = os.environ.get("APP_ENV", "").lower() in ("development", "dev")

# Initialize on import
root_logger = setup_logging(
    log_level="DEBUG" if DEBUG else os.environ.get("LOG_LEVEL", "INFO"),
    json_logs=not DEBUG
)
