"""
Plans API

Start, inspect and control plan executions.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..executor.engine import PlanExecutionService
from ..executor.errors import (
    AlreadyRunningError,
    PlanNotFoundError,
    StepIndexError,
    EmptyPlanError,
)
from ..executor.models import ExecutionState
from ..executor.plan_manager import PlanManager
from .deps import get_service, get_plan_manager
from .models import StartExecutionRequest, ExecutionStateResponse


router = APIRouter(prefix="/plans", tags=["plans"])


# =============================================================================
# Helpers
# =============================================================================

def _to_response(service: PlanExecutionService, state: ExecutionState) -> ExecutionStateResponse:
    registered = service.get_execution_state(state.plan_id) is state
    return ExecutionStateResponse.from_state(state, registered=registered)


def _require_state(service: PlanExecutionService, plan_id: str) -> ExecutionState:
    state = service.get_execution_state(plan_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Plan {plan_id} is not being executed")
    return state


# =============================================================================
# Executions
# =============================================================================

@router.post("/executions", response_model=ExecutionStateResponse, status_code=201)
async def start_execution(
    data: StartExecutionRequest,
    service: PlanExecutionService = Depends(get_service),
    plan_manager: PlanManager = Depends(get_plan_manager),
):
    """Register a plan and start running it."""
    plan = plan_manager.from_draft(data.plan)
    options = data.options.merge(service.default_options)

    try:
        state = await service.start_execution(plan, options)
    except AlreadyRunningError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except EmptyPlanError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return _to_response(service, state)


@router.get("/executions", response_model=List[ExecutionStateResponse])
async def list_executions(service: PlanExecutionService = Depends(get_service)):
    """All registered executions."""
    states = [service.get_execution_state(pid) for pid in service.active_plan_ids()]
    return [_to_response(service, s) for s in states if s is not None]


@router.get("/{plan_id}/execution", response_model=ExecutionStateResponse)
async def get_execution(plan_id: str, service: PlanExecutionService = Depends(get_service)):
    state = _require_state(service, plan_id)
    return _to_response(service, state)


# =============================================================================
# Control
# =============================================================================

@router.post("/{plan_id}/execution/next", response_model=ExecutionStateResponse)
async def execute_next_step(plan_id: str, service: PlanExecutionService = Depends(get_service)):
    """Run the step at the cursor and wait for its outcome."""
    state = _require_state(service, plan_id)
    await service.execute_next_step(plan_id)
    return _to_response(service, state)


@router.post("/{plan_id}/execution/pause", response_model=ExecutionStateResponse)
async def pause_execution(plan_id: str, service: PlanExecutionService = Depends(get_service)):
    state = _require_state(service, plan_id)
    service.pause_execution(plan_id)
    return _to_response(service, state)


@router.post("/{plan_id}/execution/resume", response_model=ExecutionStateResponse)
async def resume_execution(plan_id: str, service: PlanExecutionService = Depends(get_service)):
    state = _require_state(service, plan_id)
    service.resume_execution(plan_id)
    return _to_response(service, state)


@router.post("/{plan_id}/execution/stop", response_model=ExecutionStateResponse)
async def stop_execution(plan_id: str, service: PlanExecutionService = Depends(get_service)):
    """Unregister the plan and return its final state."""
    state = _require_state(service, plan_id)
    service.stop_execution(plan_id)
    return _to_response(service, state)


@router.post("/{plan_id}/execution/steps/{step_index}/retry", response_model=ExecutionStateResponse)
async def retry_step(
    plan_id: str,
    step_index: int,
    service: PlanExecutionService = Depends(get_service),
):
    """Reset a step and continue from it."""
    state = service.get_execution_state(plan_id)
    try:
        await service.retry_step(plan_id, step_index)
    except PlanNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StepIndexError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AlreadyRunningError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _to_response(service, state)
