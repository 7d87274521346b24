"""Text assertion: compare an element's label and value against an expectation."""

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
    MATCH_CONTAINS,
    MATCH_EXACT,
    MATCH_REGEX,
    TEXT_MATCH_MODES,
    InvalidPatternError,
    describe_expectation,
    normalize_mode,
    text_matches,
)


@dataclass(frozen=True)
class TextAssertionData:
    expected: str
    match_mode: str
    case_sensitive: bool
    element: Optional[UIElement] = None
    matched_by: Optional[str] = None
    actual_text: Optional[str] = None
    matched_field: Optional[str] = None
    total_elements_scanned: int = 0


def _evaluate(target: ElementTarget, expected: str, mode: str, case_sensitive: bool):
    desc = describe_target(target)

    def _inner(match: MatchResult, snapshot: UiSnapshot) -> CheckOutcome:
        el = match.element
        data = TextAssertionData(
            expected=expected,
            match_mode=mode,
            case_sensitive=case_sensitive,
            element=el,
            matched_by=match.matched_by,
            total_elements_scanned=snapshot.stats.total_elements,
        )
        if el is None:
            return CheckOutcome(passed=False, error=f"Element not found: {desc}", data=data)

        actual = el.label if el.label is not None else el.value
        for field_name in ("label", "value"):
            candidate = getattr(el, field_name)
            try:
                ok = text_matches(candidate, expected, mode=mode, case_sensitive=case_sensitive)
            except InvalidPatternError as e:
                return CheckOutcome(passed=False, error=str(e), data=data, final=True)
            if ok:
                return CheckOutcome(
                    passed=True,
                    data=TextAssertionData(
                        expected=expected,
                        match_mode=mode,
                        case_sensitive=case_sensitive,
                        element=el,
                        matched_by=match.matched_by,
                        actual_text=candidate,
                        matched_field=field_name,
                        total_elements_scanned=snapshot.stats.total_elements,
                    ),
                )
        data = TextAssertionData(
            expected=expected,
            match_mode=mode,
            case_sensitive=case_sensitive,
            element=el,
            matched_by=match.matched_by,
            actual_text=actual,
            total_elements_scanned=snapshot.stats.total_elements,
        )
        return CheckOutcome(
            passed=False,
            error=(
                f"Expected text {describe_expectation(expected, mode)} "
                f'but found "{actual if actual is not None else ""}": {desc}'
            ),
            data=data,
        )

    return _inner


async def assert_text(
    ctx: VerifyContext,
    *,
    session_id: str,
    target: ElementTarget,
    expected: str,
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
    if mode not in TEXT_MATCH_MODES:
        return OperationResult.from_error(
            InvalidArgumentError(f"unsupported text match mode: {match_mode}")
        )
    desc = describe_target(target)

    def make_check(device: DeviceInfo):
        return element_check(
            ctx, device, session_id, target, _evaluate(target, expected, mode, case_sensitive)
        )

    def passed_message(data: TextAssertionData) -> str:
        return f'Text matches ({mode}): "{data.actual_text}" for {desc}'

    return await run_assertion(
        ctx,
        kind="text",
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


async def assert_text_contains(ctx: VerifyContext, *, expected: str, **kwargs: Any):
    return await assert_text(ctx, expected=expected, match_mode=MATCH_CONTAINS, **kwargs)


async def assert_text_matches(ctx: VerifyContext, *, pattern: str, **kwargs: Any):
    return await assert_text(ctx, expected=pattern, match_mode=MATCH_REGEX, **kwargs)


async def assert_text_by_id(ctx: VerifyContext, identifier: str, expected: str, **kwargs: Any):
    return await assert_text(
        ctx, target=ElementTarget(identifier=identifier), expected=expected, **kwargs
    )


async def assert_text_by_label(ctx: VerifyContext, label: str, expected: str, **kwargs: Any):
    return await assert_text(ctx, target=ElementTarget(label=label), expected=expected, **kwargs)
