"""
Plan Engine - Step Handler Registry

Lookup table from step type to the function doing the work.
"""
import inspect
from typing import Optional, Dict, List, Iterable, Union

from .models import StepHandlerSpec, StepHandler
from ..executor.models import PlanStep, PlanStepType
from ..executor.errors import UnsupportedStepError


class StepHandlerRegistry:
    """
    Step Handler Registry - one handler per step type.

    Operations:
        - register(): Add handler for a step type
        - resolve(): Find handler for a step
        - dispatch(): Validate and run a step
    """

    def __init__(self):
        """Initialize empty registry."""
        self._handlers: Dict[PlanStepType, StepHandlerSpec] = {}

    def register(
        self,
        step_type: Union[PlanStepType, str],
        handler: StepHandler,
        required_fields: Iterable[str] = (),
        description: str = "",
    ) -> StepHandlerSpec:
        """
        Register a handler, replacing any previous one for the type.

        Args:
            step_type: Step type handled
            handler: Sync or async callable taking the step
            required_fields: Step attributes that must be non-empty
            description: Handler description

        Returns:
            Created StepHandlerSpec
        """
        key = PlanStepType.parse(step_type)
        if not isinstance(key, PlanStepType):
            raise ValueError(f"Unknown step type: {step_type}")

        spec = StepHandlerSpec(
            step_type=key,
            handler=handler,
            required_fields=tuple(required_fields),
            description=description,
        )
        self._handlers[spec.step_type] = spec
        return spec

    def register_spec(self, spec: StepHandlerSpec) -> None:
        """Register a StepHandlerSpec directly."""
        self._handlers[spec.step_type] = spec

    def unregister(self, step_type: Union[PlanStepType, str]) -> bool:
        """
        Remove handler from registry.

        Returns:
            True if removed, False if not found
        """
        key = PlanStepType.parse(step_type)
        if key in self._handlers:
            del self._handlers[key]
            return True
        return False

    def get(self, step_type: Union[PlanStepType, str]) -> Optional[StepHandlerSpec]:
        """Get handler spec by step type."""
        key = PlanStepType.parse(step_type)
        if not isinstance(key, PlanStepType):
            return None
        return self._handlers.get(key)

    def exists(self, step_type: Union[PlanStepType, str]) -> bool:
        return self.get(step_type) is not None

    def list(self) -> List[StepHandlerSpec]:
        return list(self._handlers.values())

    def list_types(self) -> List[PlanStepType]:
        return list(self._handlers.keys())

    def clear(self) -> None:
        self._handlers.clear()

    def resolve(self, step: PlanStep) -> StepHandlerSpec:
        """
        Find the handler for a step.

        Raises:
            UnsupportedStepError: Unknown type or no handler registered
        """
        key = PlanStepType.parse(step.type)
        if not isinstance(key, PlanStepType):
            raise UnsupportedStepError(f"Unknown step type: {key}", step_type=key)

        spec = self._handlers.get(key)
        if spec is None:
            raise UnsupportedStepError(
                f"No handler registered for step type: {key.value}",
                step_type=key.value,
            )
        return spec

    async def dispatch(self, step: PlanStep, dry_run: bool = False) -> None:
        """
        Validate a step and run its handler.

        Dry run stops after validation.

        Raises:
            UnsupportedStepError: No handler for the step type
            StepValidationError: Required field missing
            Exception: Whatever the handler raises
        """
        spec = self.resolve(step)
        spec.validate(step)

        if dry_run:
            return

        result = spec.handler(step)
        if inspect.isawaitable(result):
            await result
