"""
Plan Engine - Error Reporting

Error reporter collaborator used by the engine for step failures.
"""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Any, Deque, Dict, List

from ..config.logging import get_logger, log_error

logger = get_logger("executor.reporting")

DEFAULT_MAX_ERRORS = 100


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ReportedError:
    """Captured error record."""
    kind: str
    message: str
    severity: ErrorSeverity
    error_type: str
    context: Dict[str, Any] = field(default_factory=dict)
    count: int = 1
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "severity": self.severity.value,
            "error_type": self.error_type,
            "context": self.context,
            "count": self.count,
            "timestamp": self.timestamp.isoformat(),
        }


class ErrorReporter:
    """
    Error reporter interface.

    Fire-and-forget: the engine never awaits it and ignores its failures.
    """

    def log_error(
        self,
        kind: str,
        error: BaseException,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        raise NotImplementedError


class LoggingErrorReporter(ErrorReporter):
    """
    Logs errors and keeps a bounded most-recent-first history.

    A repeat of the same kind and message bumps the count of the existing
    record instead of adding a new one.
    """

    def __init__(self, max_errors: int = DEFAULT_MAX_ERRORS):
        self._errors: Deque[ReportedError] = deque(maxlen=max_errors)

    def log_error(
        self,
        kind: str,
        error: BaseException,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        severity = ErrorSeverity(severity)
        context = dict(context or {})
        message = str(error) or type(error).__name__

        log_error(logger, error, context=kind, severity=severity.value, **context)

        for record in self._errors:
            if record.kind == kind and record.message == message:
                record.count += 1
                record.timestamp = datetime.now(timezone.utc)
                record.context = context
                # Move to front
                self._errors.remove(record)
                self._errors.appendleft(record)
                return

        self._errors.appendleft(ReportedError(
            kind=kind,
            message=message,
            severity=severity,
            error_type=type(error).__name__,
            context=context,
        ))

    def recent(self, limit: Optional[int] = None) -> List[ReportedError]:
        """Get reported errors, most recent first."""
        errors = list(self._errors)
        return errors[:limit] if limit is not None else errors

    def clear(self) -> None:
        self._errors.clear()
