"""
Plan Engine - Execution State Store

In-memory mapping plan id -> ExecutionState. Single source of truth for
which plans are running.
"""
import copy
from typing import Optional, Dict, List, Iterator

from .models import Plan, ExecutionOptions, ExecutionState
from .errors import AlreadyRunningError


class ExecutionStateStore:
    """
    Execution State Store.

    Operations:
        - register(): Create state for a plan (one per plan id)
        - get(): Look up state
        - remove(): Drop state
    """

    def __init__(self):
        """Initialize empty store."""
        self._states: Dict[str, ExecutionState] = {}

    def register(
        self,
        plan: Plan,
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionState:
        """
        Register a plan for execution.

        The stored plan is a deep copy, the caller's object is never mutated.

        Raises:
            AlreadyRunningError: Plan id already registered
        """
        if plan.id in self._states:
            raise AlreadyRunningError(
                f"Plan {plan.id} is already being executed",
                plan_id=plan.id,
            )

        state = ExecutionState(
            plan=copy.deepcopy(plan),
            options=copy.copy(options) if options else ExecutionOptions(),
        )
        self._states[plan.id] = state
        return state

    def get(self, plan_id: str) -> Optional[ExecutionState]:
        """Get state by plan id."""
        return self._states.get(plan_id)

    def remove(self, plan_id: str) -> Optional[ExecutionState]:
        """
        Remove state.

        Returns:
            Removed state, or None if not registered
        """
        return self._states.pop(plan_id, None)

    def plan_ids(self) -> List[str]:
        """List registered plan ids."""
        return list(self._states.keys())

    def clear(self) -> None:
        """Remove all states."""
        self._states.clear()

    def __contains__(self, plan_id: str) -> bool:
        return plan_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[ExecutionState]:
        return iter(list(self._states.values()))
