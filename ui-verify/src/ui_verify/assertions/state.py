"""Boolean element-state assertions (enabled, selected, hittable and inverses).

All share one shape: the element must exist; when visibility is required an
invisible element fails with a distinct reason; then the state flag is
compared with the expected value.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from ui_verify.assertions.base import (
    ElementStateData,
    VerifyContext,
    element_check,
    run_assertion,
)
from ui_verify.device.base import DeviceInfo, UiSnapshot
from ui_verify.elements import ElementTarget, UIElement
from ui_verify.verification.matcher import MatchResult, describe_target, is_hittable
from ui_verify.verification.polling import CancellationToken, CheckOutcome, PollingOptions
from ui_verify.verification.results import OperationResult, VerificationResult


@dataclass(frozen=True)
class StateRule:
    kind: str
    attribute: str
    expected: bool
    failure: str
    success: str


def read_state(element: UIElement, attribute: str) -> bool:
    if attribute == "hittable":
        return is_hittable(element)
    return bool(getattr(element, attribute))


def _evaluate(rule: StateRule, target: ElementTarget, require_visible: bool):
    desc = describe_target(target)

    def _inner(match: MatchResult, snapshot: UiSnapshot) -> CheckOutcome:
        el = match.element
        data = ElementStateData(
            matched_by=match.matched_by,
            total_elements_scanned=snapshot.stats.total_elements,
            visibility_required=require_visible,
        )
        if el is None:
            return CheckOutcome(passed=False, error=f"Element not found: {desc}", data=data)

        state = read_state(el, rule.attribute)
        data = replace(data, element=el, was_visible=el.visible, **{f"was_{rule.attribute}": state})
        if require_visible and not el.visible:
            return CheckOutcome(
                passed=False, error=f"Element found but not visible: {desc}", data=data
            )
        if state != rule.expected:
            return CheckOutcome(passed=False, error=f"{rule.failure}: {desc}", data=data)
        return CheckOutcome(passed=True, data=data)

    return _inner


async def assert_state(
    ctx: VerifyContext,
    rule: StateRule,
    *,
    session_id: str,
    target: ElementTarget,
    require_visible: bool = True,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    bundle_id: Optional[str] = None,
    cancel: Optional[CancellationToken] = None,
) -> OperationResult[VerificationResult[Any]]:
    desc = describe_target(target)

    def make_check(device: DeviceInfo):
        return element_check(ctx, device, session_id, target, _evaluate(rule, target, require_visible))

    def passed_message(data: ElementStateData) -> str:
        return f"{rule.success}: {desc} (matched by {data.matched_by})"

    return await run_assertion(
        ctx,
        kind=rule.kind,
        target=desc,
        session_id=session_id,
        make_check=make_check,
        passed_message=passed_message,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        bundle_id=bundle_id,
        cancel=cancel,
    )
