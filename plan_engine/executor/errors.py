"""
Plan Engine - Execution Errors

Exceptions raised by the store, the handler registry and the engine.
"""
from typing import Optional


class PlanExecutionError(Exception):
    """Base class for plan execution errors."""
    pass


class AlreadyRunningError(PlanExecutionError):
    """Raised when a plan is already registered or has a step in flight."""

    def __init__(self, message: str, plan_id: Optional[str] = None):
        super().__init__(message)
        self.plan_id = plan_id


class PlanNotFoundError(PlanExecutionError, LookupError):
    """Raised when a plan is not registered for execution."""

    def __init__(self, message: str, plan_id: Optional[str] = None):
        super().__init__(message)
        self.plan_id = plan_id


class StepIndexError(PlanExecutionError, IndexError):
    """Raised when a step index is outside the plan's step list."""

    def __init__(self, message: str, step_index: Optional[int] = None):
        super().__init__(message)
        self.step_index = step_index


class EmptyPlanError(PlanExecutionError, ValueError):
    """Raised when starting a plan without steps."""
    pass


class StepValidationError(PlanExecutionError, ValueError):
    """Raised when a step is missing a field required by its type."""

    def __init__(
        self,
        message: str,
        step_type: Optional[str] = None,
        field_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.step_type = step_type
        self.field_name = field_name


class UnsupportedStepError(StepValidationError):
    """Raised when no handler exists for a step type."""
    pass
