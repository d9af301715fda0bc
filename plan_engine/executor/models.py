"""
Plan Engine - Executor Models

Data classes for execution: Plan, PlanStep, ExecutionOptions, ExecutionState.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Any, List, Dict, Union
from enum import Enum
import uuid
import json


class PlanStepType(str, Enum):
    """Kinds of plan steps."""
    THINK = "THINK"
    READ_FILE = "READ_FILE"
    CREATE_FILE = "CREATE_FILE"
    EDIT_FILE = "EDIT_FILE"
    DELETE_FILE = "DELETE_FILE"
    RUN_COMMAND = "RUN_COMMAND"

    @classmethod
    def parse(cls, value: Any) -> Union["PlanStepType", str]:
        """
        Map a raw type value onto the enum.

        Unknown values are returned as plain strings so the engine can
        report them as unsupported at dispatch time.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return str(value)


class StepStatus(str, Enum):
    """Step execution status."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Check if the step reached a final status."""
        return self in (StepStatus.COMPLETED, StepStatus.ERROR)


class PlanStatus(str, Enum):
    """Plan state machine states."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"
    PAUSED = "paused"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_ts(val) -> Optional[datetime]:
    if val is None:
        return None
    if isinstance(val, datetime):
        return val
    if isinstance(val, str):
        # Handle ISO format with or without timezone
        val = val.replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(val)
        except ValueError:
            return None
    return None


@dataclass
class PlanStep:
    """Single action in a plan."""
    id: str
    type: Union[PlanStepType, str]

    # Kind-specific payload
    file_path: Optional[str] = None
    content: Optional[str] = None
    command: Optional[str] = None
    thought: Optional[str] = None
    description: Optional[str] = None

    # Execution state
    status: StepStatus = StepStatus.PENDING
    error: Optional[str] = None

    # Timing
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # milliseconds

    @classmethod
    def create(cls, step_type: Union[PlanStepType, str], **payload) -> "PlanStep":
        """Create new step with generated ID."""
        return cls(
            id=str(uuid.uuid4())[:8],
            type=PlanStepType.parse(step_type),
            **payload,
        )

    @property
    def type_name(self) -> str:
        """Step type as a plain string."""
        return self.type.value if isinstance(self.type, PlanStepType) else str(self.type)

    def mark_running(self, now: Optional[datetime] = None) -> None:
        self.status = StepStatus.RUNNING
        self.start_time = now or utcnow()
        self.end_time = None
        self.duration = None
        self.error = None

    def mark_completed(self, now: Optional[datetime] = None) -> None:
        self.status = StepStatus.COMPLETED
        self._stamp_end(now)

    def mark_error(self, message: str, now: Optional[datetime] = None) -> None:
        self.status = StepStatus.ERROR
        self.error = message
        self._stamp_end(now)

    def reset(self) -> None:
        """Put the step back to pending, dropping its previous attempt."""
        self.status = StepStatus.PENDING
        self.error = None
        self.start_time = None
        self.end_time = None
        self.duration = None

    def _stamp_end(self, now: Optional[datetime]) -> None:
        self.end_time = now or utcnow()
        if self.start_time is not None:
            delta = self.end_time - self.start_time
            self.duration = int(delta.total_seconds() * 1000)
        else:
            self.duration = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-safe dictionary."""
        return {
            "id": self.id,
            "type": self.type_name,
            "status": self.status.value,
            "file_path": self.file_path,
            "content": self.content,
            "command": self.command,
            "thought": self.thought,
            "description": self.description,
            "error": self.error,
            "start_time": _iso(self.start_time),
            "end_time": _iso(self.end_time),
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "PlanStep":
        """Create from dictionary."""
        return cls(
            id=data.get("id") or str(uuid.uuid4())[:8],
            type=PlanStepType.parse(data["type"]),
            file_path=data.get("file_path"),
            content=data.get("content"),
            command=data.get("command"),
            thought=data.get("thought"),
            description=data.get("description"),
            status=StepStatus(data.get("status", "pending")),
            error=data.get("error"),
            start_time=_parse_ts(data.get("start_time")),
            end_time=_parse_ts(data.get("end_time")),
            duration=data.get("duration"),
        )


@dataclass
class Plan:
    """
    Unit of AI-directed work.

    Contains ordered steps executed one at a time.
    """
    id: str
    title: str
    steps: List[PlanStep] = field(default_factory=list)
    status: PlanStatus = PlanStatus.PENDING
    current_step: int = 0
    description: Optional[str] = None

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    error: Optional[str] = None

    @classmethod
    def create(
        cls,
        title: str,
        steps: Optional[List[PlanStep]] = None,
        description: Optional[str] = None,
    ) -> "Plan":
        """Create new plan with generated ID."""
        return cls(
            id=str(uuid.uuid4())[:8],
            title=title,
            steps=steps or [],
            description=description,
        )

    @property
    def completed_count(self) -> int:
        return sum(1 for s in self.steps if s.status == StepStatus.COMPLETED)

    @property
    def progress(self) -> float:
        """Fraction of completed steps (0.0 - 1.0)."""
        if not self.steps:
            return 0.0
        return self.completed_count / len(self.steps)

    @property
    def failed_steps(self) -> List[PlanStep]:
        return [s for s in self.steps if s.status == StepStatus.ERROR]

    def get_step(self, step_id: str) -> Optional[PlanStep]:
        """Get step by ID."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-safe dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "current_step": self.current_step,
            "steps": [s.to_dict() for s in self.steps],
            "start_time": _iso(self.start_time),
            "end_time": _iso(self.end_time),
            "error": self.error,
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Export plan as JSON."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_dict(cls, data: Dict) -> "Plan":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            description=data.get("description"),
            steps=[PlanStep.from_dict(s) for s in data.get("steps", [])],
            status=PlanStatus(data.get("status", "pending")),
            current_step=data.get("current_step", 0),
            start_time=_parse_ts(data.get("start_time")),
            end_time=_parse_ts(data.get("end_time")),
            error=data.get("error"),
        )


@dataclass
class ExecutionOptions:
    """Execution policy for one run."""
    auto_proceed: bool = True
    pause_on_error: bool = True
    dry_run: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "auto_proceed": self.auto_proceed,
            "pause_on_error": self.pause_on_error,
            "dry_run": self.dry_run,
        }


@dataclass
class ExecutionState:
    """
    Live run wrapper around a Plan.

    Mutated only by the engine. Listeners receive it read-only.
    """
    plan: Plan
    options: ExecutionOptions = field(default_factory=ExecutionOptions)
    current_step_index: int = 0
    is_executing: bool = False
    is_paused: bool = False

    # Engine bookkeeping
    step_in_flight: bool = field(default=False, repr=False)
    advance_scheduled: bool = field(default=False, repr=False)

    @property
    def plan_id(self) -> str:
        return self.plan.id

    @property
    def current(self) -> Optional[PlanStep]:
        """Step at the cursor, None once past the last step."""
        if 0 <= self.current_step_index < len(self.plan.steps):
            return self.plan.steps[self.current_step_index]
        return None

    @property
    def is_finished(self) -> bool:
        return self.current_step_index >= len(self.plan.steps)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-safe dictionary."""
        return {
            "plan": self.plan.to_dict(),
            "current_step_index": self.current_step_index,
            "is_executing": self.is_executing,
            "is_paused": self.is_paused,
            "options": self.options.to_dict(),
        }
