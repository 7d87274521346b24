"""Value assertion for inputs, sliders and other value-bearing elements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ui_verify.assertions.base import VerifyContext, element_check, run_assertion
from ui_verify.device.base import DeviceInfo, UiSnapshot
from ui_verify.elements import ElementTarget, UIElement
from ui_verify.errors import InvalidArgumentError
from ui_verify.verification.matcher import MatchResult, describe_target
from ui_verify.verification.polling import CancellationToken, CheckOutcome, PollingOptions
from ui_verify.verification.results import OperationResult, VerificationResult
from ui_verify.verification.text_match import (
    MATCH_EMPTY,
    MATCH_EXACT,
    MATCH_NOT_EMPTY,
    InvalidPatternError,
    describe_expectation,
    normalize_mode,
    text_matches,
)


@dataclass(frozen=True)
class ValueAssertionData:
    expected: Optional[str]
    match_mode: str
    element: Optional[UIElement] = None
    matched_by: Optional[str] = None
    actual_value: Optional[str] = None
    total_elements_scanned: int = 0


def _evaluate(target: ElementTarget, expected: Optional[str], mode: str, case_sensitive: bool):
    desc = describe_target(target)

    def _inner(match: MatchResult, snapshot: UiSnapshot) -> CheckOutcome:
        el = match.element
        data = ValueAssertionData(
            expected=expected,
            match_mode=mode,
            element=el,
            matched_by=match.matched_by,
            actual_value=el.value if el is not None else None,
            total_elements_scanned=snapshot.stats.total_elements,
        )
        if el is None:
            return CheckOutcome(passed=False, error=f"Element not found: {desc}", data=data)
        try:
            ok = text_matches(el.value, expected, mode=mode, case_sensitive=case_sensitive)
        except InvalidPatternError as e:
            return CheckOutcome(passed=False, error=str(e), data=data, final=True)
        if ok:
            return CheckOutcome(passed=True, data=data)
        return CheckOutcome(
            passed=False,
            error=(
                f"Expected value {describe_expectation(expected, mode)} "
                f'but found "{el.value or ""}": {desc}'
            ),
            data=data,
        )

    return _inner


async def assert_value(
    ctx: VerifyContext,
    *,
    session_id: str,
    target: ElementTarget,
    expected: Optional[str] = None,
    match_mode: str = MATCH_EXACT,
    case_sensitive: bool = True,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    bundle_id: Optional[str] = None,
    cancel: Optional[CancellationToken] = None,
) -> OperationResult[VerificationResult[Any]]:
    try:
        mode = normalize_mode(match_mode)
    except ValueError as e:
        return OperationResult.from_error(InvalidArgumentError(str(e)))
    if expected is None and mode not in (MATCH_EMPTY, MATCH_NOT_EMPTY):
        return OperationResult.from_error(
            InvalidArgumentError(f"expected is required for match mode {mode}")
        )
    desc = describe_target(target)

    def make_check(device: DeviceInfo):
        return element_check(
            ctx, device, session_id, target, _evaluate(target, expected, mode, case_sensitive)
        )

    def passed_message(data: ValueAssertionData) -> str:
        return f'Value matches ({mode}): "{data.actual_value or ""}" for {desc}'

    return await run_assertion(
        ctx,
        kind="value",
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


async def assert_value_empty(ctx: VerifyContext, **kwargs: Any):
    return await assert_value(ctx, match_mode=MATCH_EMPTY, **kwargs)


async def assert_value_not_empty(ctx: VerifyContext, **kwargs: Any):
    return await assert_value(ctx, match_mode=MATCH_NOT_EMPTY, **kwargs)


async def assert_value_by_id(ctx: VerifyContext, identifier: str, expected: str, **kwargs: Any):
    return await assert_value(
        ctx, target=ElementTarget(identifier=identifier), expected=expected, **kwargs
    )
