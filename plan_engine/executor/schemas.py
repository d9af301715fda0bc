"""
Plan Engine - Plan Draft Schemas (Pydantic)

Validation of AI-generated step lists before they become Plans.
"""
from typing import Optional, List

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .models import PlanStepType


class StepDraft(BaseModel):
    """One step as produced by a planner. Accepts snake_case and camelCase keys."""
    id: Optional[str] = None
    type: PlanStepType
    file_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("file_path", "filePath"),
    )
    content: Optional[str] = None
    command: Optional[str] = None
    thought: Optional[str] = None
    description: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        if isinstance(value, str):
            return value.strip().upper().replace("-", "_").replace(" ", "_")
        return value


class PlanDraft(BaseModel):
    """Plan as produced by a planner."""
    id: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    steps: List[StepDraft] = Field(..., min_length=1)
