"""
Plan Engine - Builtin Step Handlers

Default handlers for every step type. They validate and log, the host
application registers real file and process implementations over them.
"""
import asyncio
from typing import Optional

from .registry import StepHandlerRegistry
from ..executor.models import PlanStep, PlanStepType
from ..config.logging import get_logger
from ..config.settings import DEFAULT_THINK_DELAY_SECONDS

logger = get_logger("handlers.builtin")


def _make_think(think_delay_seconds: float):
    async def _think(step: PlanStep) -> None:
        logger.debug("Thinking: %s", step.thought or "")
        await asyncio.sleep(think_delay_seconds)
    return _think


async def _read_file(step: PlanStep) -> None:
    logger.info("Read file %s", step.file_path)


async def _create_file(step: PlanStep) -> None:
    logger.info("Create file %s (%d chars)", step.file_path, len(step.content or ""))


async def _edit_file(step: PlanStep) -> None:
    logger.info("Edit file %s (%d chars)", step.file_path, len(step.content or ""))


async def _delete_file(step: PlanStep) -> None:
    logger.info("Delete file %s", step.file_path)


async def _run_command(step: PlanStep) -> None:
    logger.info("Run command: %s", step.command)


def register_builtin_handlers(
    registry: StepHandlerRegistry,
    think_delay_seconds: float = DEFAULT_THINK_DELAY_SECONDS,
) -> None:
    """Register builtin handlers to registry."""

    registry.register(
        PlanStepType.THINK,
        _make_think(think_delay_seconds),
        description="Reasoning step, nothing to execute",
    )

    registry.register(
        PlanStepType.READ_FILE,
        _read_file,
        required_fields=("file_path",),
        description="Read file content",
    )

    registry.register(
        PlanStepType.CREATE_FILE,
        _create_file,
        required_fields=("file_path", "content"),
        description="Create a file",
    )

    registry.register(
        PlanStepType.EDIT_FILE,
        _edit_file,
        required_fields=("file_path", "content"),
        description="Write new content to a file",
    )

    registry.register(
        PlanStepType.DELETE_FILE,
        _delete_file,
        required_fields=("file_path",),
        description="Delete a file",
    )

    registry.register(
        PlanStepType.RUN_COMMAND,
        _run_command,
        required_fields=("command",),
        description="Run a shell command",
    )


def build_default_registry(
    think_delay_seconds: Optional[float] = None,
) -> StepHandlerRegistry:
    """Create a registry with builtin handlers."""
    registry = StepHandlerRegistry()
    register_builtin_handlers(
        registry,
        DEFAULT_THINK_DELAY_SECONDS if think_delay_seconds is None else think_delay_seconds,
    )
    return registry
