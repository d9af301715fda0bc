"""
API Dependencies

Execution service injection.
"""

from fastapi import Request

from ..executor.engine import PlanExecutionService
from ..executor.plan_manager import PlanManager


def get_service(request: Request) -> PlanExecutionService:
    """Execution service owned by the app."""
    return request.app.state.service


def get_plan_manager(request: Request) -> PlanManager:
    return request.app.state.plan_manager
