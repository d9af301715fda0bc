"""
Plan Engine - Plan Manager

Builds executable plans from AI-generated step lists.
"""
from typing import Optional, Dict, List, Any

from .models import Plan, PlanStep, PlanStepType
from .schemas import PlanDraft, StepDraft


DEFAULT_TITLE = "Untitled plan"
MAX_TITLE_LENGTH = 80


class PlanManager:
    """
    Creates Plan objects from planner output.

    Planner output is validated with pydantic, step ids are generated
    where missing.
    """

    def build_plan(
        self,
        steps: List[Dict[str, Any]],
        title: Optional[str] = None,
        description: Optional[str] = None,
        plan_id: Optional[str] = None,
    ) -> Plan:
        """
        Build plan from raw step dicts.

        Args:
            steps: Step dicts (type + payload)
            title: Plan title (derived from the first thought if None)
            description: Optional description
            plan_id: Fixed plan id (generated if None)

        Returns:
            Plan in pending state

        Raises:
            pydantic.ValidationError: Unknown step type or empty step list
        """
        draft = PlanDraft.model_validate({
            "id": plan_id,
            "title": title,
            "description": description,
            "steps": steps,
        })
        return self.from_draft(draft)

    def from_ai_response(self, payload: Dict[str, Any], title: Optional[str] = None) -> Plan:
        """Build plan from a planner response like {"steps": [...]}."""
        data = dict(payload)
        if title:
            data["title"] = title
        return self.from_draft(PlanDraft.model_validate(data))

    def from_draft(self, draft: PlanDraft) -> Plan:
        """Build plan from a validated draft."""
        steps = [self._build_step(s) for s in draft.steps]

        plan = Plan.create(
            title=draft.title or self._derive_title(steps),
            steps=steps,
            description=draft.description,
        )
        if draft.id:
            plan.id = draft.id
        return plan

    def _build_step(self, draft: StepDraft) -> PlanStep:
        step = PlanStep.create(
            draft.type,
            file_path=draft.file_path,
            content=draft.content,
            command=draft.command,
            thought=draft.thought,
            description=draft.description,
        )
        if draft.id:
            step.id = draft.id
        return step

    def _derive_title(self, steps: List[PlanStep]) -> str:
        """First THINK thought, shortened."""
        for step in steps:
            if step.type == PlanStepType.THINK and step.thought:
                title = step.thought.strip()
                if len(title) > MAX_TITLE_LENGTH:
                    title = title[:MAX_TITLE_LENGTH - 1].rstrip() + "…"
                return title
        return DEFAULT_TITLE
