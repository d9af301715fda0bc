"""
Plan Engine - Configuration
"""
from .settings import Settings, EngineSettings, LoggingSettings, ApiSettings, settings
from .logging import (
    setup_logging,
    get_logger,
    log_step_event,
    log_error,
    request_id_var,
    JSONFormatter,
    ColoredFormatter,
)

__all__ = [
    "Settings",
    "EngineSettings",
    "LoggingSettings",
    "ApiSettings",
    "settings",
    # Logging
    "setup_logging",
    "get_logger",
    "log_step_event",
    "log_error",
    "request_id_var",
    "JSONFormatter",
    "ColoredFormatter",
]
