"""
API Models (Pydantic)

Request/Response schemas for the API.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from ..executor.models import ExecutionState, ExecutionOptions, PlanStatus, StepStatus
from ..executor.schemas import PlanDraft


# =============================================================================
# Requests
# =============================================================================

class ExecutionOptionsModel(BaseModel):
    """Execution policy. Omitted fields use the service defaults."""
    auto_proceed: Optional[bool] = None
    pause_on_error: Optional[bool] = None
    dry_run: Optional[bool] = None

    def merge(self, defaults: ExecutionOptions) -> ExecutionOptions:
        return ExecutionOptions(
            auto_proceed=defaults.auto_proceed if self.auto_proceed is None else self.auto_proceed,
            pause_on_error=defaults.pause_on_error if self.pause_on_error is None else self.pause_on_error,
            dry_run=defaults.dry_run if self.dry_run is None else self.dry_run,
        )


class StartExecutionRequest(BaseModel):
    """Start a plan."""
    plan: PlanDraft
    options: ExecutionOptionsModel = Field(default_factory=ExecutionOptionsModel)


# =============================================================================
# Responses
# =============================================================================

class StepResponse(BaseModel):
    id: str
    type: str
    status: StepStatus
    file_path: Optional[str] = None
    content: Optional[str] = None
    command: Optional[str] = None
    thought: Optional[str] = None
    description: Optional[str] = None
    error: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # ms


class PlanResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    status: PlanStatus
    current_step: int
    steps: List[StepResponse]
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    error: Optional[str] = None
    progress: float = 0.0


class ExecutionStateResponse(BaseModel):
    """Execution state as seen by UI hosts."""
    plan: PlanResponse
    current_step_index: int
    is_executing: bool
    is_paused: bool
    options: ExecutionOptionsModel
    registered: bool

    @classmethod
    def from_state(cls, state: ExecutionState, registered: bool) -> "ExecutionStateResponse":
        data = state.to_dict()
        data["plan"]["progress"] = state.plan.progress
        data["registered"] = registered
        return cls.model_validate(data)


class ErrorResponse(BaseModel):
    detail: str
