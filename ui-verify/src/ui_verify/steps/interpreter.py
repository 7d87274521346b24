"""Step interpreter: validate structured steps and dispatch them to assertions."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ui_verify.assertions.base import VerifyContext
from ui_verify.assertions.screen import ScreenDefinition, parse_screens
from ui_verify.errors import ErrorCode
from ui_verify.loader import (
    SchemaValidationError,
    load_schema,
    load_yaml_or_json,
    validate_against_schema,
)
from ui_verify.steps.registry import StepEnv, get_step_handler
from ui_verify.steps.targets import TargetParseError
from ui_verify.verification.results import OperationResult, VerificationResult

logger = logging.getLogger(__name__)

STEPS_SCHEMA = "steps.schema.json"


class StepValidationError(RuntimeError):
    pass


@dataclass(frozen=True)
class StepResult:
    step: Mapping[str, Any]
    success: bool
    duration_ms: int = 0
    error: Optional[str] = None
    failure_reason: Optional[str] = None
    verification: Optional[VerificationResult[Any]] = None
    artifacts: List[Path] = field(default_factory=list)
    skipped: bool = False

    @property
    def step_type(self) -> str:
        return str(self.step.get("type", ""))


@dataclass(frozen=True)
class StepBatchResult:
    results: List[StepResult]
    duration_ms: int

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success and not r.skipped)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)


@dataclass(frozen=True)
class StepsFile:
    steps: List[Dict[str, Any]]
    screens: Dict[str, ScreenDefinition]
    session_id: Optional[str] = None
    bundle_id: Optional[str] = None
    device_id: Optional[str] = None
    stop_on_failure: bool = True


def _step_schema() -> Dict[str, Any]:
    schema = load_schema(STEPS_SCHEMA)
    return {"$ref": "#/$defs/step", "$defs": schema["$defs"]}


def validate_step(step: Mapping[str, Any], *, where: str = "step") -> None:
    try:
        validate_against_schema(dict(step), _step_schema(), where=where)
    except SchemaValidationError as e:
        raise StepValidationError(str(e)) from e


def format_verification_result(
    result: OperationResult,
) -> Dict[str, Any]:
    """Collapse the two tiers into `success`, `failure_reason` and `error`.

    Outer failures report their error code; evaluated-but-unsatisfied checks
    report `FAILED` or `TIMEOUT`.
    """
    if not result.success:
        code = result.error_code.value if result.error_code else ErrorCode.COMMAND_FAILED.value
        return {"success": False, "failure_reason": code, "error": result.error}
    inner = result.data
    if inner is None:
        return {"success": True, "failure_reason": None, "error": None}
    if inner.passed:
        return {"success": True, "failure_reason": None, "error": None}
    return {
        "success": False,
        "failure_reason": inner.status.value.upper(),
        "error": inner.message,
    }


async def execute_step(
    ctx: VerifyContext,
    step: Mapping[str, Any],
    env: StepEnv,
) -> StepResult:
    start = time.monotonic()

    def _elapsed() -> int:
        return int(round((time.monotonic() - start) * 1000))

    try:
        validate_step(step)
    except StepValidationError as e:
        return StepResult(
            step=step,
            success=False,
            duration_ms=_elapsed(),
            error=str(e),
            failure_reason=ErrorCode.INVALID_ARGUMENT.value,
        )

    step_type = str(step["type"])
    handler = get_step_handler(step_type)
    if handler is None:
        return StepResult(
            step=step,
            success=False,
            duration_ms=_elapsed(),
            error=f"Unsupported step type: {step_type}",
            failure_reason=ErrorCode.INVALID_ARGUMENT.value,
        )

    logger.info("step %s%s", step_type, f": {step['description']}" if step.get("description") else "")
    try:
        result = await handler(ctx, step, env)
    except (TargetParseError, ValueError) as e:
        return StepResult(
            step=step,
            success=False,
            duration_ms=_elapsed(),
            error=str(e),
            failure_reason=ErrorCode.INVALID_ARGUMENT.value,
        )

    summary = format_verification_result(result)
    verification = result.data if result.success else None
    artifacts: List[Path] = []
    if verification is not None and verification.artifacts is not None:
        artifacts = list(verification.artifacts.screenshots)
    return StepResult(
        step=step,
        success=summary["success"],
        duration_ms=_elapsed(),
        error=summary["error"],
        failure_reason=summary["failure_reason"],
        verification=verification,
        artifacts=artifacts,
    )


async def execute_steps(
    ctx: VerifyContext,
    steps: Sequence[Mapping[str, Any]],
    env: StepEnv,
    *,
    stop_on_failure: bool = True,
) -> StepBatchResult:
    """Run steps in order; after a failure the rest are skipped if requested."""
    start = time.monotonic()
    results: List[StepResult] = []
    failed = False
    for idx, step in enumerate(steps):
        if failed and stop_on_failure:
            results.append(
                StepResult(
                    step=step,
                    success=False,
                    error="Skipped after an earlier failure",
                    skipped=True,
                )
            )
            continue
        res = await execute_step(ctx, step, env)
        results.append(res)
        if not res.success:
            failed = True
            logger.warning(
                "step %d (%s) failed [%s]: %s", idx + 1, res.step_type, res.failure_reason, res.error
            )
    return StepBatchResult(results=results, duration_ms=int(round((time.monotonic() - start) * 1000)))


def parse_steps_document(doc: Mapping[str, Any], *, where: str = "steps") -> StepsFile:
    try:
        validate_against_schema(dict(doc), load_schema(STEPS_SCHEMA), where=where)
        screens = parse_screens({"screens": doc.get("screens") or {}}, where=f"{where}:screens")
    except SchemaValidationError as e:
        raise StepValidationError(str(e)) from e
    return StepsFile(
        steps=[dict(s) for s in doc.get("steps") or []],
        screens=screens,
        session_id=doc.get("session_id"),
        bundle_id=doc.get("bundle_id"),
        device_id=doc.get("device_id"),
        stop_on_failure=bool(doc.get("stop_on_failure", True)),
    )


def load_steps_file(path: Path) -> StepsFile:
    return parse_steps_document(load_yaml_or_json(path), where=str(path))
