from ui_verify.steps.interpreter import (
    StepBatchResult,
    StepResult,
    StepsFile,
    StepValidationError,
    execute_step,
    execute_steps,
    format_verification_result,
    load_steps_file,
    parse_steps_document,
)
from ui_verify.steps.registry import StepEnv, available_steps, register_step
from ui_verify.steps.targets import TargetParseError, parse_target

__all__ = [
    "StepBatchResult",
    "StepEnv",
    "StepResult",
    "StepValidationError",
    "StepsFile",
    "TargetParseError",
    "available_steps",
    "execute_step",
    "execute_steps",
    "format_verification_result",
    "load_steps_file",
    "parse_steps_document",
    "parse_target",
    "register_step",
]
