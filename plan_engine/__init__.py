"""
Plan Engine

Sequential execution of AI-generated action plans
(think → read file → edit file → run command).
"""
from .executor import (
    Plan,
    PlanStep,
    PlanStepType,
    PlanStatus,
    StepStatus,
    ExecutionOptions,
    ExecutionState,
    PlanExecutionError,
    AlreadyRunningError,
    PlanNotFoundError,
    StepIndexError,
    EmptyPlanError,
    StepValidationError,
    UnsupportedStepError,
    PlanManager,
    PlanExecutionService,
)
from .handlers import StepHandlerRegistry, build_default_registry

__version__ = "0.1.0"

__all__ = [
    "Plan",
    "PlanStep",
    "PlanStepType",
    "PlanStatus",
    "StepStatus",
    "ExecutionOptions",
    "ExecutionState",
    "PlanExecutionError",
    "AlreadyRunningError",
    "PlanNotFoundError",
    "StepIndexError",
    "EmptyPlanError",
    "StepValidationError",
    "UnsupportedStepError",
    "PlanManager",
    "PlanExecutionService",
    "StepHandlerRegistry",
    "build_default_registry",
]
