"""
Plan Engine - Executor

Runs AI-generated plans step by step.
"""
from .models import (
    Plan,
    PlanStep,
    PlanStepType,
    PlanStatus,
    StepStatus,
    ExecutionOptions,
    ExecutionState,
)
from .errors import (
    PlanExecutionError,
    AlreadyRunningError,
    PlanNotFoundError,
    StepIndexError,
    EmptyPlanError,
    StepValidationError,
    UnsupportedStepError,
)
from .store import ExecutionStateStore
from .observers import ObserverBus
from .deferral import Deferral, AsyncioDeferral, QueuedDeferral
from .reporting import ErrorReporter, LoggingErrorReporter, ErrorSeverity, ReportedError
from .schemas import PlanDraft, StepDraft
from .plan_manager import PlanManager
from .engine import PlanExecutionService

__all__ = [
    # Models
    "Plan",
    "PlanStep",
    "PlanStepType",
    "PlanStatus",
    "StepStatus",
    "ExecutionOptions",
    "ExecutionState",
    # Errors
    "PlanExecutionError",
    "AlreadyRunningError",
    "PlanNotFoundError",
    "StepIndexError",
    "EmptyPlanError",
    "StepValidationError",
    "UnsupportedStepError",
    # State & notification
    "ExecutionStateStore",
    "ObserverBus",
    "Deferral",
    "AsyncioDeferral",
    "QueuedDeferral",
    # Error reporting
    "ErrorReporter",
    "LoggingErrorReporter",
    "ErrorSeverity",
    "ReportedError",
    # Plan intake
    "PlanDraft",
    "StepDraft",
    "PlanManager",
    # Engine
    "PlanExecutionService",
]
