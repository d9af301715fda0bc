"""
Tests for step handler registry and builtin handlers

Run with: pytest -q
"""
import pytest

from plan_engine.executor import (
    PlanStep,
    PlanStepType,
    StepValidationError,
    UnsupportedStepError,
)
from plan_engine.handlers import (
    StepHandlerRegistry,
    StepHandlerSpec,
    build_default_registry,
)


class TestStepHandlerRegistry:
    """Tests for StepHandlerRegistry."""

    @pytest.fixture
    def empty_registry(self):
        return StepHandlerRegistry()

    def test_register_and_get(self, empty_registry):
        def handler(step):
            return None

        spec = empty_registry.register("read_file", handler, required_fields=["file_path"])

        assert spec.step_type == PlanStepType.READ_FILE
        assert spec.required_fields == ("file_path",)
        assert empty_registry.get(PlanStepType.READ_FILE) is spec
        assert empty_registry.exists("READ_FILE")
        assert empty_registry.list_types() == [PlanStepType.READ_FILE]

    def test_register_unknown_type(self, empty_registry):
        with pytest.raises(ValueError):
            empty_registry.register("DEPLOY", lambda step: None)

    def test_register_replaces(self, empty_registry):
        empty_registry.register(PlanStepType.THINK, lambda step: None)
        second = empty_registry.register(PlanStepType.THINK, lambda step: None, description="v2")

        assert len(empty_registry.list()) == 1
        assert empty_registry.get(PlanStepType.THINK) is second

    def test_unregister(self, empty_registry):
        empty_registry.register(PlanStepType.THINK, lambda step: None)

        assert empty_registry.unregister(PlanStepType.THINK) is True
        assert empty_registry.unregister(PlanStepType.THINK) is False
        assert not empty_registry.exists(PlanStepType.THINK)

    def test_get_unknown_type(self, empty_registry):
        assert empty_registry.get("DEPLOY") is None

    def test_resolve_unknown_type(self, empty_registry):
        step = PlanStep(id="s1", type="DEPLOY")

        with pytest.raises(UnsupportedStepError, match="Unknown step type: DEPLOY"):
            empty_registry.resolve(step)

    def test_resolve_missing_handler(self, empty_registry):
        step = PlanStep.create(PlanStepType.THINK, thought="x")

        with pytest.raises(UnsupportedStepError, match="No handler registered for step type: THINK"):
            empty_registry.resolve(step)

    def test_register_spec(self, empty_registry):
        spec = StepHandlerSpec(step_type=PlanStepType.DELETE_FILE, handler=lambda step: None)
        empty_registry.register_spec(spec)

        assert empty_registry.get("DELETE_FILE") is spec

    @pytest.mark.asyncio
    async def test_dispatch_sync_handler(self, empty_registry):
        seen = []
        empty_registry.register(PlanStepType.RUN_COMMAND, seen.append, required_fields=["command"])
        step = PlanStep.create(PlanStepType.RUN_COMMAND, command="ls")

        await empty_registry.dispatch(step)

        assert seen == [step]

    @pytest.mark.asyncio
    async def test_dispatch_async_handler(self, empty_registry):
        seen = []

        async def handler(step):
            seen.append(step.id)

        empty_registry.register(PlanStepType.THINK, handler)
        step = PlanStep.create(PlanStepType.THINK, thought="x")

        await empty_registry.dispatch(step)

        assert seen == [step.id]

    @pytest.mark.asyncio
    async def test_dispatch_dry_run_skips_handler(self, empty_registry):
        seen = []
        empty_registry.register(PlanStepType.RUN_COMMAND, seen.append, required_fields=["command"])
        step = PlanStep.create(PlanStepType.RUN_COMMAND, command="rm -rf build")

        await empty_registry.dispatch(step, dry_run=True)

        assert seen == []

    @pytest.mark.asyncio
    async def test_dispatch_dry_run_still_validates(self, empty_registry):
        empty_registry.register(PlanStepType.RUN_COMMAND, lambda step: None, required_fields=["command"])
        step = PlanStep.create(PlanStepType.RUN_COMMAND)

        with pytest.raises(StepValidationError, match="command is required for RUN_COMMAND step"):
            await empty_registry.dispatch(step, dry_run=True)

    @pytest.mark.asyncio
    async def test_dispatch_propagates_handler_error(self, empty_registry):
        def handler(step):
            raise RuntimeError("disk full")

        empty_registry.register(PlanStepType.THINK, handler)

        with pytest.raises(RuntimeError, match="disk full"):
            await empty_registry.dispatch(PlanStep.create(PlanStepType.THINK, thought="x"))


class TestStepHandlerSpec:
    """Tests for required field validation."""

    def test_missing_field_named(self):
        spec = StepHandlerSpec(
            step_type=PlanStepType.EDIT_FILE,
            handler=lambda step: None,
            required_fields=("file_path", "content"),
        )
        step = PlanStep.create(PlanStepType.EDIT_FILE, file_path="/a.ts")

        with pytest.raises(StepValidationError) as exc_info:
            spec.validate(step)

        assert str(exc_info.value) == "content is required for EDIT_FILE step"
        assert exc_info.value.field_name == "content"
        assert exc_info.value.step_type == "EDIT_FILE"

    def test_empty_string_is_missing(self):
        spec = StepHandlerSpec(
            step_type=PlanStepType.RUN_COMMAND,
            handler=lambda step: None,
            required_fields=("command",),
        )

        with pytest.raises(StepValidationError):
            spec.validate(PlanStep.create(PlanStepType.RUN_COMMAND, command=""))

    def test_to_dict(self):
        spec = StepHandlerSpec(
            step_type=PlanStepType.READ_FILE,
            handler=lambda step: None,
            required_fields=("file_path",),
            description="Read file content",
        )

        assert spec.to_dict() == {
            "step_type": "READ_FILE",
            "required_fields": ["file_path"],
            "description": "Read file content",
        }


class TestBuiltinHandlers:
    """Tests for the default registry."""

    def test_all_types_registered(self):
        registry = build_default_registry(think_delay_seconds=0)

        assert set(registry.list_types()) == set(PlanStepType)

    @pytest.mark.parametrize("step_type, field_name", [
        (PlanStepType.READ_FILE, "file_path"),
        (PlanStepType.CREATE_FILE, "file_path"),
        (PlanStepType.EDIT_FILE, "file_path"),
        (PlanStepType.DELETE_FILE, "file_path"),
        (PlanStepType.RUN_COMMAND, "command"),
    ])
    def test_required_fields(self, step_type, field_name):
        registry = build_default_registry(think_delay_seconds=0)

        assert field_name in registry.get(step_type).required_fields

    def test_think_has_no_required_fields(self):
        registry = build_default_registry(think_delay_seconds=0)

        assert registry.get(PlanStepType.THINK).required_fields == ()

    @pytest.mark.asyncio
    async def test_builtin_dispatch(self):
        registry = build_default_registry(think_delay_seconds=0)

        await registry.dispatch(PlanStep.create(PlanStepType.THINK, thought="plan it"))
        await registry.dispatch(PlanStep.create(PlanStepType.EDIT_FILE, file_path="/a.ts", content="x"))
        await registry.dispatch(PlanStep.create(PlanStepType.RUN_COMMAND, command="echo ok"))
