"""
Plan Engine - Step Handlers
"""
from .models import StepHandlerSpec, StepHandler
from .registry import StepHandlerRegistry
from .builtin import register_builtin_handlers, build_default_registry

__all__ = [
    "StepHandlerSpec",
    "StepHandler",
    "StepHandlerRegistry",
    "register_builtin_handlers",
    "build_default_registry",
]
