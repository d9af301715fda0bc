"""
Shared pytest fixtures for the Plan Engine test suite.

Module-level defaults. Individual test classes may override
with their own class-level fixtures (pytest priority: class > conftest).
"""
import pytest

from plan_engine.executor import (
    Plan,
    PlanStep,
    PlanStepType,
    PlanExecutionService,
    QueuedDeferral,
    LoggingErrorReporter,
)
from plan_engine.handlers import build_default_registry


STEP_PAYLOADS = {
    PlanStepType.THINK: {"thought": "Figure out what to change"},
    PlanStepType.READ_FILE: {"file_path": "/src/app.ts"},
    PlanStepType.CREATE_FILE: {"file_path": "/src/new.ts", "content": "export {}"},
    PlanStepType.EDIT_FILE: {"file_path": "/a.ts", "content": "x"},
    PlanStepType.DELETE_FILE: {"file_path": "/src/old.ts"},
    PlanStepType.RUN_COMMAND: {"command": "echo ok"},
}


@pytest.fixture
def deferral():
    """Deterministic yield primitive, drained by the test."""
    return QueuedDeferral()


@pytest.fixture
def registry():
    """Builtin handlers without think delay."""
    return build_default_registry(think_delay_seconds=0)


@pytest.fixture
def reporter():
    return LoggingErrorReporter()


@pytest.fixture
def service(registry, deferral, reporter):
    """Execution service wired to the queued deferral."""
    return PlanExecutionService(
        handlers=registry,
        deferral=deferral,
        error_reporter=reporter,
        step_delay_seconds=0,
    )


@pytest.fixture
def make_plan():
    """Factory: make_plan(PlanStepType.THINK, PlanStep(...), ..., plan_id="p1")."""

    def _make(*steps, plan_id="plan-1", title="Test plan"):
        built = []
        for item in steps:
            if isinstance(item, PlanStep):
                built.append(item)
            else:
                built.append(PlanStep.create(item, **STEP_PAYLOADS[item]))
        plan = Plan.create(title=title, steps=built)
        plan.id = plan_id
        return plan

    return _make
