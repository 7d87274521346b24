"""Composite screen assertion.

A `ScreenDefinition` lists elements that must be visible, must not be
visible, must be enabled and must be disabled. Each attempt evaluates every
check against one snapshot and aggregates them:

  * `require_all=True`: every check must pass.
  * `require_all=False`: each non-empty category needs at least one passing
    check; empty categories are satisfied vacuously.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ui_verify.assertions.base import VerifyContext, run_assertion
from ui_verify.device.base import DeviceInfo, UiSnapshot
from ui_verify.elements import ElementSpec, ElementTarget, UIElement
from ui_verify.errors import InvalidArgumentError
from ui_verify.loader import load_schema, load_yaml_or_json, validate_against_schema
from ui_verify.verification.matcher import describe_spec, find_target
from ui_verify.verification.polling import CancellationToken, CheckOutcome, PollingOptions
from ui_verify.verification.results import OperationResult, VerificationResult

CHECK_VISIBLE = "visible"
CHECK_NOT_VISIBLE = "not_visible"
CHECK_ENABLED = "enabled"
CHECK_DISABLED = "disabled"

REASON_NOT_FOUND = "Element not found"
REASON_NOT_VISIBLE = "Element exists but is not visible"
REASON_UNEXPECTEDLY_VISIBLE = "Element is visible when it should not be"
REASON_HIDDEN = "Element is not visible"
REASON_DISABLED = "Element is disabled"
REASON_ENABLED = "Element is enabled when it should be disabled"


@dataclass(frozen=True)
class ScreenDefinition:
    name: str
    elements: List[ElementSpec] = field(default_factory=list)
    not_visible: List[ElementSpec] = field(default_factory=list)
    enabled: List[ElementSpec] = field(default_factory=list)
    disabled: List[ElementSpec] = field(default_factory=list)
    description: Optional[str] = None


@dataclass(frozen=True)
class ElementCheckResult:
    spec: ElementSpec
    check_type: str
    passed: bool
    element: Optional[UIElement] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class ScreenAssertionData:
    screen_name: str
    screen_description: Optional[str]
    element_checks: List[ElementCheckResult]
    total_checks: int
    passed_checks: int
    failed_checks: int
    total_elements_scanned: int
    summary: str


def check_element(tree: UIElement, spec: ElementSpec, check_type: str) -> ElementCheckResult:
    """Evaluate one spec; `enabled` missing on a node counts as enabled."""
    el = find_target(tree, spec).element

    if check_type == CHECK_NOT_VISIBLE:
        if el is not None and el.visible:
            return ElementCheckResult(spec, check_type, False, el, REASON_UNEXPECTEDLY_VISIBLE)
        return ElementCheckResult(spec, check_type, True, el)

    if el is None:
        return ElementCheckResult(spec, check_type, False, None, REASON_NOT_FOUND)

    if check_type == CHECK_VISIBLE:
        if not el.visible:
            return ElementCheckResult(spec, check_type, False, el, REASON_NOT_VISIBLE)
        return ElementCheckResult(spec, check_type, True, el)

    if not el.visible:
        return ElementCheckResult(spec, check_type, False, el, REASON_HIDDEN)
    if check_type == CHECK_ENABLED and not el.enabled:
        return ElementCheckResult(spec, check_type, False, el, REASON_DISABLED)
    if check_type == CHECK_DISABLED and el.enabled:
        return ElementCheckResult(spec, check_type, False, el, REASON_ENABLED)
    return ElementCheckResult(spec, check_type, True, el)


def evaluate_screen(tree: UIElement, screen: ScreenDefinition) -> List[ElementCheckResult]:
    checks: List[ElementCheckResult] = []
    for check_type, specs in (
        (CHECK_VISIBLE, screen.elements),
        (CHECK_NOT_VISIBLE, screen.not_visible),
        (CHECK_ENABLED, screen.enabled),
        (CHECK_DISABLED, screen.disabled),
    ):
        checks.extend(check_element(tree, spec, check_type) for spec in specs)
    return checks


def screen_passes(checks: Sequence[ElementCheckResult], *, require_all: bool) -> bool:
    if require_all:
        return all(c.passed for c in checks)
    by_type: Dict[str, List[ElementCheckResult]] = {}
    for c in checks:
        by_type.setdefault(c.check_type, []).append(c)
    return all(any(c.passed for c in group) for group in by_type.values())


def summarize(screen_name: str, checks: Sequence[ElementCheckResult], *, passed: bool) -> str:
    if passed:
        n_passed = sum(1 for c in checks if c.passed)
        return f'Screen "{screen_name}" verified: {n_passed}/{len(checks)} checks passed'
    failing = ", ".join(describe_spec(c.spec) for c in checks if not c.passed)
    return f'Screen "{screen_name}" failed: {failing}'


def _failure_detail(checks: Sequence[ElementCheckResult]) -> str:
    return "; ".join(f"{describe_spec(c.spec)}: {c.reason}" for c in checks if not c.passed)


async def assert_screen(
    ctx: VerifyContext,
    *,
    session_id: str,
    screen: ScreenDefinition,
    require_all: bool = True,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    bundle_id: Optional[str] = None,
    cancel: Optional[CancellationToken] = None,
) -> OperationResult[VerificationResult[Any]]:
    def _data(checks: List[ElementCheckResult], snapshot: UiSnapshot, passed: bool):
        n_passed = sum(1 for c in checks if c.passed)
        return ScreenAssertionData(
            screen_name=screen.name,
            screen_description=screen.description,
            element_checks=checks,
            total_checks=len(checks),
            passed_checks=n_passed,
            failed_checks=len(checks) - n_passed,
            total_elements_scanned=snapshot.stats.total_elements,
            summary=summarize(screen.name, checks, passed=passed),
        )

    def make_check(device: DeviceInfo):
        async def _check() -> CheckOutcome:
            snapshot = await ctx.backend.inspect(device.id, session_id)
            checks = evaluate_screen(snapshot.tree, screen)
            passed = screen_passes(checks, require_all=require_all)
            data = _data(checks, snapshot, passed)
            if passed:
                return CheckOutcome(passed=True, data=data)
            return CheckOutcome(passed=False, error=_failure_detail(checks), data=data)

        return _check

    def passed_message(data: ScreenAssertionData) -> str:
        return data.summary

    def failed_message(outcome) -> str:
        data = outcome.last_data
        if isinstance(data, ScreenAssertionData):
            return data.summary
        return outcome.last_error or f'Screen "{screen.name}" failed'

    return await run_assertion(
        ctx,
        kind="screen",
        target=f'screen "{screen.name}"',
        session_id=session_id,
        make_check=make_check,
        passed_message=passed_message,
        failed_message=failed_message,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        bundle_id=bundle_id,
        cancel=cancel,
    )


async def assert_screen_by_name(
    ctx: VerifyContext,
    name: str,
    registry: Mapping[str, ScreenDefinition],
    **kwargs: Any,
) -> OperationResult[VerificationResult[Any]]:
    screen = registry.get(name)
    if screen is None:
        available = ", ".join(sorted(registry)) or "none"
        err = InvalidArgumentError(f'Unknown screen "{name}". Available screens: {available}')
        return OperationResult.from_error(err)
    return await assert_screen(ctx, screen=screen, **kwargs)


def parse_spec(raw: Any) -> ElementSpec:
    """`#id` -> identifier, `@label` -> label, anything else -> text.

    Mappings may use the keys identifier/label/text/type directly.
    """
    if isinstance(raw, Mapping):
        spec = ElementTarget(
            identifier=raw.get("identifier"),
            label=raw.get("label"),
            text=raw.get("text"),
            type=raw.get("type"),
        )
        if spec.is_empty():
            raise ValueError(f"element spec needs identifier, label, text or type: {dict(raw)}")
        return spec
    s = str(raw)
    if s.startswith("#") and len(s) > 1:
        return ElementTarget(identifier=s[1:])
    if s.startswith("@") and len(s) > 1:
        return ElementTarget(label=s[1:])
    return ElementTarget(text=s)


def create_screen_definition(
    name: str,
    elements: Sequence[str],
    not_visible: Sequence[str] = (),
    *,
    description: Optional[str] = None,
) -> ScreenDefinition:
    """Quick builder: `#x` is an identifier, anything else is text."""

    def _spec(s: str) -> ElementSpec:
        if s.startswith("#") and len(s) > 1:
            return ElementTarget(identifier=s[1:])
        return ElementTarget(text=s)

    return ScreenDefinition(
        name=name,
        description=description,
        elements=[_spec(s) for s in elements],
        not_visible=[_spec(s) for s in not_visible],
    )


def parse_screen_definition(config: Mapping[str, Any]) -> ScreenDefinition:
    return ScreenDefinition(
        name=str(config["name"]),
        description=config.get("description"),
        elements=[parse_spec(x) for x in config.get("elements") or ()],
        not_visible=[parse_spec(x) for x in config.get("not_visible") or ()],
        enabled=[parse_spec(x) for x in config.get("enabled") or ()],
        disabled=[parse_spec(x) for x in config.get("disabled") or ()],
    )


def parse_screens(doc: Mapping[str, Any], *, where: str = "screens") -> Dict[str, ScreenDefinition]:
    """Validate a `{screens: {...}}` document and build the name registry."""
    validate_against_schema(dict(doc), load_schema("screens.schema.json"), where=where)
    registry: Dict[str, ScreenDefinition] = {}
    for name, body in (doc.get("screens") or {}).items():
        registry[name] = parse_screen_definition({"name": name, **dict(body)})
    return registry


def load_screens(path: Path) -> Dict[str, ScreenDefinition]:
    return parse_screens(load_yaml_or_json(path), where=str(path))
