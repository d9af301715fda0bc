"""
Plan Engine - Plan Execution Service

Drives plans forward one step at a time, with pause/resume, retry and
observer notification.
"""
from typing import Optional, Callable, List

from .models import (
    Plan,
    PlanStep,
    PlanStatus,
    ExecutionOptions,
    ExecutionState,
    utcnow,
)
from .store import ExecutionStateStore
from .observers import ObserverBus, Listener
from .deferral import Deferral, AsyncioDeferral
from .reporting import ErrorReporter, LoggingErrorReporter, ErrorSeverity
from .errors import (
    AlreadyRunningError,
    PlanNotFoundError,
    StepIndexError,
    EmptyPlanError,
)
from ..handlers import StepHandlerRegistry, build_default_registry
from ..config.logging import get_logger, log_step_event
from ..config.settings import Settings, DEFAULT_STEP_DELAY_SECONDS

logger = get_logger("executor.engine")

ERROR_KIND = "runtime"
ERROR_SOURCE = "PlanExecutionService"


class PlanExecutionService:
    """
    Plan Execution Service - runs plans step by step.

    State Machine (Plan):
        pending → running → completed
                    │ ↑
                    │ ├── paused (pause / stop)
                    │ │
                    └→ error (retry / resume → running)

    Operations:
        - start_execution(): Register plan and begin
        - execute_next_step(): Run the step at the cursor
        - pause_execution(): Withhold the next dispatch
        - resume_execution(): Continue a paused plan
        - stop_execution(): Unregister plan
        - retry_step(): Re-run a step and continue from it

    Single flight: one ExecutionState per plan id, at most one step of a
    plan in flight, at most one deferred advance pending per plan.
    """

    def __init__(
        self,
        handlers: Optional[StepHandlerRegistry] = None,
        store: Optional[ExecutionStateStore] = None,
        observers: Optional[ObserverBus] = None,
        deferral: Optional[Deferral] = None,
        error_reporter: Optional[ErrorReporter] = None,
        step_delay_seconds: float = DEFAULT_STEP_DELAY_SECONDS,
        default_options: Optional[ExecutionOptions] = None,
    ):
        """
        Initialize PlanExecutionService.

        Args:
            handlers: Step handler registry (builtin handlers if None)
            store: Execution state store
            observers: Observer bus
            deferral: Yield primitive between auto-proceeding steps
            error_reporter: Collaborator receiving step failures
            step_delay_seconds: Delay between auto-proceeding steps
            default_options: Options used when start_execution gets none
        """
        self._handlers = handlers or build_default_registry()
        self._store = store or ExecutionStateStore()
        self._observers = observers or ObserverBus()
        self._deferral = deferral or AsyncioDeferral()
        self._error_reporter = error_reporter or LoggingErrorReporter()
        self._step_delay = step_delay_seconds
        self._default_options = default_options or ExecutionOptions()

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "PlanExecutionService":
        """Build a service from configuration. Keyword overrides win."""
        engine = settings.engine
        kwargs = {
            "handlers": build_default_registry(engine.think_delay_seconds),
            "step_delay_seconds": engine.step_delay_seconds,
            "default_options": ExecutionOptions(
                auto_proceed=engine.auto_proceed,
                pause_on_error=engine.pause_on_error,
                dry_run=engine.dry_run,
            ),
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    @property
    def handlers(self) -> StepHandlerRegistry:
        return self._handlers

    @property
    def store(self) -> ExecutionStateStore:
        return self._store

    @property
    def observers(self) -> ObserverBus:
        return self._observers

    @property
    def deferral(self) -> Deferral:
        return self._deferral

    @property
    def error_reporter(self) -> ErrorReporter:
        return self._error_reporter

    @property
    def default_options(self) -> ExecutionOptions:
        return self._default_options

    # ==================== LIFECYCLE ====================

    async def start_execution(
        self,
        plan: Plan,
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionState:
        """
        Register a plan and start running it.

        Args:
            plan: Plan with at least one step
            options: Execution policy (service defaults if None)

        Returns:
            Registered execution state

        Raises:
            EmptyPlanError: Plan has no steps
            AlreadyRunningError: Plan id already registered
        """
        if not plan.steps:
            raise EmptyPlanError(f"Plan {plan.id} has no steps")

        state = self._store.register(plan, options or self._default_options)

        state.plan.status = PlanStatus.RUNNING
        state.plan.start_time = utcnow()
        state.plan.end_time = None
        state.plan.error = None
        state.plan.current_step = 0
        state.current_step_index = 0
        state.is_executing = True
        state.is_paused = False

        logger.info(
            "Plan %s started (%d steps)",
            plan.id,
            len(plan.steps),
            extra={"extra_data": {"plan_id": plan.id, **state.options.to_dict()}},
        )
        self._notify(state)

        if state.options.auto_proceed:
            self._schedule_advance(state, 0.0)

        return state

    async def execute_next_step(self, plan_id: str) -> None:
        """
        Run the step at the cursor.

        No-op when the plan is not registered, is paused, or already has a
        step in flight. Step failures are recorded on the state, never raised.
        """
        state = self._store.get(plan_id)
        if state is None or state.is_paused or state.step_in_flight:
            return

        if state.is_finished:
            self._finalize(state)
            return

        index = state.current_step_index
        step = state.plan.steps[index]

        step.mark_running()
        state.plan.status = PlanStatus.RUNNING
        state.plan.error = None
        state.is_executing = True
        state.step_in_flight = True
        log_step_event(logger, plan_id, step, "started", step_index=index)
        self._notify(state)

        error: Optional[Exception] = None
        try:
            await self._handlers.dispatch(step, dry_run=state.options.dry_run)
        except Exception as e:
            error = e
        finally:
            state.step_in_flight = False

        if error is None:
            self._on_step_completed(state, index, step)
        else:
            self._on_step_failed(state, index, step, error)

    def pause_execution(self, plan_id: str) -> None:
        """Withhold the next step dispatch. A step in flight still completes."""
        state = self._store.get(plan_id)
        if state is None:
            return

        state.is_paused = True
        if state.plan.status == PlanStatus.RUNNING:
            state.plan.status = PlanStatus.PAUSED

        logger.info("Plan %s paused at step %d", plan_id, state.current_step_index)
        self._notify(state)

    def resume_execution(self, plan_id: str) -> None:
        """
        Continue a paused plan.

        A failed step at the cursor keeps its error until it is dispatched
        again. With auto_proceed, must be called from inside the running
        event loop when the service uses AsyncioDeferral.
        """
        state = self._store.get(plan_id)
        if state is None or not state.is_paused:
            return

        # Schedule first: a deferral failure leaves the state untouched
        if state.options.auto_proceed:
            self._schedule_advance(state, 0.0)
            state.is_executing = True

        state.is_paused = False
        state.plan.status = PlanStatus.RUNNING

        logger.info("Plan %s resumed at step %d", plan_id, state.current_step_index)
        self._notify(state)

    def stop_execution(self, plan_id: str) -> None:
        """Unregister a plan. Completed steps are kept, a step in flight is not aborted."""
        state = self._store.get(plan_id)
        if state is None:
            return

        state.is_executing = False
        state.is_paused = False
        state.plan.status = PlanStatus.PAUSED

        logger.info("Plan %s stopped at step %d", plan_id, state.current_step_index)
        self._notify(state)
        self._unregister(state)

    async def retry_step(self, plan_id: str, step_index: int) -> None:
        """
        Reset a step and continue execution from it.

        Steps after it keep their status and run again as the cursor
        reaches them.

        Raises:
            PlanNotFoundError: Plan not registered
            StepIndexError: Index outside the step list
            AlreadyRunningError: A step of the plan is in flight
        """
        state = self._store.get(plan_id)
        if state is None:
            raise PlanNotFoundError(f"Plan {plan_id} is not being executed", plan_id=plan_id)

        if step_index < 0 or step_index >= len(state.plan.steps):
            raise StepIndexError(f"Invalid step index: {step_index}", step_index=step_index)

        if state.step_in_flight:
            raise AlreadyRunningError(
                f"Plan {plan_id} has a step in flight",
                plan_id=plan_id,
            )

        state.plan.steps[step_index].reset()
        state.current_step_index = step_index
        state.plan.current_step = step_index
        state.plan.status = PlanStatus.RUNNING
        state.plan.error = None
        state.plan.end_time = None
        state.is_paused = False
        state.is_executing = True

        logger.info("Plan %s retrying step %d", plan_id, step_index)
        self._notify(state)

        await self.execute_next_step(plan_id)

    # ==================== QUERIES ====================

    def get_execution_state(self, plan_id: str) -> Optional[ExecutionState]:
        """Get execution state, None if the plan is not registered."""
        return self._store.get(plan_id)

    def subscribe(self, plan_id: str, listener: Listener) -> Callable[[], None]:
        """
        Subscribe to state updates of a plan. Returns unsubscribe function.

        Listeners are dropped once the plan completes or is stopped.
        """
        return self._observers.subscribe(plan_id, listener)

    def active_plan_ids(self) -> List[str]:
        return self._store.plan_ids()

    # ==================== STEP OUTCOMES ====================

    def _on_step_completed(self, state: ExecutionState, index: int, step: PlanStep) -> None:
        step.mark_completed()

        if not self._owns_cursor(state, index):
            log_step_event(logger, state.plan_id, step, "completed after cursor moved")
            return

        log_step_event(logger, state.plan_id, step, "completed", step_index=index)
        state.current_step_index = index + 1
        state.plan.current_step = state.current_step_index
        self._notify(state)

        if not self._is_registered(state):
            return

        if state.is_finished:
            self._finalize(state)
        elif state.options.auto_proceed:
            self._schedule_advance(state, self._step_delay)

    def _on_step_failed(
        self,
        state: ExecutionState,
        index: int,
        step: PlanStep,
        error: Exception,
    ) -> None:
        message = str(error) or type(error).__name__
        step.mark_error(message)

        if not self._owns_cursor(state, index):
            log_step_event(logger, state.plan_id, step, "failed after cursor moved", error=message)
            return

        log_step_event(logger, state.plan_id, step, "failed", step_index=index, error=message)

        state.plan.status = PlanStatus.ERROR
        state.plan.error = message
        state.is_executing = False

        advance = not state.options.pause_on_error
        if advance:
            state.current_step_index = index + 1
            state.plan.current_step = state.current_step_index
        else:
            state.is_paused = True

        self._notify(state)
        self._report(state, index, step, error)

        if not advance or not self._is_registered(state):
            return

        if state.is_finished:
            self._finalize(state)
        elif state.options.auto_proceed:
            state.is_executing = True
            self._schedule_advance(state, self._step_delay)

    def _finalize(self, state: ExecutionState) -> None:
        plan = state.plan
        plan.end_time = utcnow()
        state.is_executing = False

        failed = plan.failed_steps
        if failed:
            # Reachable only when errors were advanced past
            plan.status = PlanStatus.ERROR
            plan.error = failed[-1].error
            logger.warning(
                "Plan %s finished with %d failed step(s)",
                plan.id,
                len(failed),
                extra={"extra_data": {"plan_id": plan.id, "error": plan.error}},
            )
            self._notify(state)
            return

        plan.status = PlanStatus.COMPLETED
        plan.error = None
        logger.info(
            "Plan %s completed (%d steps)",
            plan.id,
            len(plan.steps),
            extra={"extra_data": {"plan_id": plan.id}},
        )
        self._notify(state)
        self._unregister(state)

    # ==================== HELPERS ====================

    def _schedule_advance(self, state: ExecutionState, delay_seconds: float) -> None:
        if state.advance_scheduled:
            return
        plan_id = state.plan_id

        async def _advance() -> None:
            state.advance_scheduled = False
            if self._store.get(plan_id) is not state:
                return
            await self.execute_next_step(plan_id)

        self._deferral.defer(_advance, delay_seconds)
        state.advance_scheduled = True

    def _is_registered(self, state: ExecutionState) -> bool:
        return self._store.get(state.plan_id) is state

    def _owns_cursor(self, state: ExecutionState, index: int) -> bool:
        """Outcome of step `index` may still move this state."""
        return self._is_registered(state) and state.current_step_index == index

    def _unregister(self, state: ExecutionState) -> None:
        if self._is_registered(state):
            self._store.remove(state.plan_id)
            # Final notification already delivered
            self._observers.clear(state.plan_id)

    def _notify(self, state: ExecutionState) -> None:
        self._observers.notify(state.plan_id, state)

    def _report(self, state: ExecutionState, index: int, step: PlanStep, error: Exception) -> None:
        try:
            self._error_reporter.log_error(
                ERROR_KIND,
                error,
                ErrorSeverity.ERROR,
                {
                    "source": ERROR_SOURCE,
                    "plan_id": state.plan_id,
                    "step_id": step.id,
                    "step_index": index,
                    "step_type": step.type_name,
                },
            )
        except Exception:
            logger.exception("Error reporter failed for plan %s", state.plan_id)
