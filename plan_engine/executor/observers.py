"""
Plan Engine - Observer Bus

Per-plan fan-out of execution state changes.
"""
from typing import Callable, Dict, List

from .models import ExecutionState
from ..config.logging import get_logger

logger = get_logger("executor.observers")

Listener = Callable[[ExecutionState], None]


class ObserverBus:
    """
    Observer Bus.

    Delivery is synchronous and in subscription order. A failing listener
    is logged and skipped. Listeners of a plan live until unsubscribed or
    cleared; the engine clears them when it unregisters the plan.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def subscribe(self, plan_id: str, listener: Listener) -> Callable[[], None]:
        """
        Subscribe to state updates of one plan.

        Returns:
            Function removing the subscription (safe to call twice)
        """
        listeners = self._listeners.setdefault(plan_id, [])
        if listener not in listeners:
            listeners.append(listener)

        def unsubscribe() -> None:
            current = self._listeners.get(plan_id)
            if current and listener in current:
                current.remove(listener)
                if not current:
                    del self._listeners[plan_id]

        return unsubscribe

    def notify(self, plan_id: str, state: ExecutionState) -> None:
        """Deliver state to every listener of the plan."""
        # Copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners.get(plan_id, ())):
            try:
                listener(state)
            except Exception:
                logger.exception("Error in plan execution listener for plan %s", plan_id)

    def listener_count(self, plan_id: str) -> int:
        return len(self._listeners.get(plan_id, ()))

    def clear(self, plan_id: str) -> None:
        """Drop all listeners of a plan."""
        self._listeners.pop(plan_id, None)
