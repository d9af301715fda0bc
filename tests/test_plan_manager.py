"""
Tests for PlanManager and plan draft schemas

Run with: pytest -q
"""
import pytest
from pydantic import ValidationError

from plan_engine.executor import (
    PlanManager,
    PlanDraft,
    StepDraft,
    PlanStepType,
    PlanStatus,
    StepStatus,
)


class TestStepDraft:
    """Tests for StepDraft validation."""

    def test_type_normalized(self):
        assert StepDraft(type="edit-file").type == PlanStepType.EDIT_FILE
        assert StepDraft(type=" run command ").type == PlanStepType.RUN_COMMAND
        assert StepDraft(type="think").type == PlanStepType.THINK

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            StepDraft(type="DEPLOY")

    def test_camel_case_file_path(self):
        draft = StepDraft.model_validate({"type": "READ_FILE", "filePath": "/a.ts"})

        assert draft.file_path == "/a.ts"

    def test_snake_case_file_path(self):
        draft = StepDraft.model_validate({"type": "READ_FILE", "file_path": "/b.ts"})

        assert draft.file_path == "/b.ts"


class TestPlanDraft:
    """Tests for PlanDraft validation."""

    def test_empty_steps_rejected(self):
        with pytest.raises(ValidationError):
            PlanDraft(steps=[])

    def test_steps_required(self):
        with pytest.raises(ValidationError):
            PlanDraft.model_validate({"title": "no steps"})

    def test_title_length(self):
        with pytest.raises(ValidationError):
            PlanDraft(title="x" * 201, steps=[{"type": "THINK"}])


class TestPlanManager:
    """Tests for PlanManager."""

    @pytest.fixture
    def pm(self):
        return PlanManager()

    def test_build_plan(self, pm):
        plan = pm.build_plan(
            [
                {"type": "THINK", "thought": "Rename the helper"},
                {"type": "EDIT_FILE", "filePath": "/a.ts", "content": "x"},
                {"type": "RUN_COMMAND", "command": "npm test"},
            ],
            title="Rename helper",
        )

        assert plan.title == "Rename helper"
        assert plan.status == PlanStatus.PENDING
        assert plan.current_step == 0
        assert [s.type for s in plan.steps] == [
            PlanStepType.THINK, PlanStepType.EDIT_FILE, PlanStepType.RUN_COMMAND,
        ]
        assert plan.steps[1].file_path == "/a.ts"
        assert all(s.status == StepStatus.PENDING for s in plan.steps)
        assert len({s.id for s in plan.steps}) == 3

    def test_fixed_ids(self, pm):
        plan = pm.build_plan([{"id": "s-1", "type": "THINK"}], plan_id="p-1")

        assert plan.id == "p-1"
        assert plan.steps[0].id == "s-1"

    def test_title_from_first_thought(self, pm):
        plan = pm.build_plan([
            {"type": "READ_FILE", "file_path": "/a.ts"},
            {"type": "THINK", "thought": "  Add retry logic  "},
        ])

        assert plan.title == "Add retry logic"

    def test_long_title_truncated(self, pm):
        plan = pm.build_plan([{"type": "THINK", "thought": "word " * 40}])

        assert len(plan.title) <= 80
        assert plan.title.endswith("…")

    def test_default_title(self, pm):
        plan = pm.build_plan([{"type": "RUN_COMMAND", "command": "ls"}])

        assert plan.title == "Untitled plan"

    def test_from_ai_response(self, pm):
        plan = pm.from_ai_response(
            {
                "description": "Generated by planner",
                "steps": [{"type": "create-file", "filePath": "/n.ts", "content": "1"}],
            },
            title="Create n.ts",
        )

        assert plan.title == "Create n.ts"
        assert plan.description == "Generated by planner"
        assert plan.steps[0].type == PlanStepType.CREATE_FILE

    def test_invalid_response(self, pm):
        with pytest.raises(ValidationError):
            pm.from_ai_response({"steps": [{"type": "DEPLOY"}]})

    def test_missing_fields_allowed_at_intake(self, pm):
        # Required payload is checked when the step runs
        plan = pm.build_plan([{"type": "EDIT_FILE", "file_path": "/a.ts"}])

        assert plan.steps[0].content is None
