"""
Plan Engine - Step Handler Models
"""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Tuple, Union

from ..executor.models import PlanStep, PlanStepType
from ..executor.errors import StepValidationError

StepHandler = Callable[[PlanStep], Union[Awaitable[None], None]]


@dataclass
class StepHandlerSpec:
    """
    Handler definition for one step type.

    Required fields are checked before the handler runs.
    """
    step_type: PlanStepType
    handler: StepHandler
    required_fields: Tuple[str, ...] = field(default_factory=tuple)
    description: str = ""

    def validate(self, step: PlanStep) -> None:
        """
        Check required fields of a step.

        Raises:
            StepValidationError: First missing or empty field
        """
        for name in self.required_fields:
            if not getattr(step, name, None):
                raise StepValidationError(
                    f"{name} is required for {self.step_type.value} step",
                    step_type=self.step_type.value,
                    field_name=name,
                )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (without handler)."""
        return {
            "step_type": self.step_type.value,
            "required_fields": list(self.required_fields),
            "description": self.description,
        }
