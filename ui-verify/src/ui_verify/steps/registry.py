"""Step handler registry.

Adding a new step type should not require changing the interpreter: handlers
register themselves here by step type.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from ui_verify.assertions.base import VerifyContext
from ui_verify.assertions.screen import ScreenDefinition
from ui_verify.verification.results import OperationResult


@dataclass(frozen=True)
class StepEnv:
    """Per-run values shared by every step of a batch."""

    session_id: str
    device_id: Optional[str] = None
    bundle_id: Optional[str] = None
    screens: Mapping[str, ScreenDefinition] = field(default_factory=dict)


StepHandler = Callable[[VerifyContext, Mapping[str, Any], StepEnv], Awaitable[OperationResult]]

_REGISTRY: Dict[str, StepHandler] = {}
_BUILTIN_STEP_MODULES = [
    "ui_verify.steps.handlers",
]
_BUILTINS_LOADED = False


def register_step(step_type: str) -> Callable[[StepHandler], StepHandler]:
    """Decorator to register a step handler."""

    def _decorator(handler: StepHandler) -> StepHandler:
        if step_type in _REGISTRY:
            raise ValueError(f"duplicate step type: {step_type}")
        _REGISTRY[step_type] = handler
        return handler

    return _decorator


def available_steps() -> Dict[str, StepHandler]:
    load_builtin_steps()
    return dict(_REGISTRY)


def get_step_handler(step_type: str) -> Optional[StepHandler]:
    load_builtin_steps()
    return _REGISTRY.get(step_type)


def load_builtin_steps() -> None:
    """Import built-in handler modules so they can register their step types."""

    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return

    for module_name in _BUILTIN_STEP_MODULES:
        importlib.import_module(module_name)
    _BUILTINS_LOADED = True
