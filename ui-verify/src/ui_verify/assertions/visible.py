"""Visibility assertions: visible / not visible, plus the wait-for aliases."""

from __future__ import annotations

from typing import Any, Optional

from ui_verify.assertions.base import (
    ElementStateData,
    VerifyContext,
    element_check,
    run_assertion,
)
from ui_verify.device.base import DeviceInfo, UiSnapshot
from ui_verify.elements import ElementTarget
from ui_verify.verification.matcher import MatchResult, describe_target
from ui_verify.verification.polling import CancellationToken, CheckOutcome, PollingOptions
from ui_verify.verification.results import OperationResult, VerificationResult


def _evaluate_visible(target: ElementTarget, require_enabled: bool):
    desc = describe_target(target)

    def _evaluate(match: MatchResult, snapshot: UiSnapshot) -> CheckOutcome:
        el = match.element
        data = ElementStateData(
            element=el,
            matched_by=match.matched_by,
            total_elements_scanned=snapshot.stats.total_elements,
            was_visible=el.visible if el is not None else None,
            was_enabled=el.enabled if el is not None else None,
        )
        if el is None:
            return CheckOutcome(passed=False, error=f"Element not found: {desc}", data=data)
        if not el.visible:
            return CheckOutcome(
                passed=False, error=f"Element found but not visible: {desc}", data=data
            )
        if require_enabled and not el.enabled:
            return CheckOutcome(
                passed=False, error=f"Element visible but not enabled: {desc}", data=data
            )
        return CheckOutcome(passed=True, data=data)

    return _evaluate


def _evaluate_not_visible(target: ElementTarget):
    desc = describe_target(target)

    def _evaluate(match: MatchResult, snapshot: UiSnapshot) -> CheckOutcome:
        el = match.element
        data = ElementStateData(
            element=el,
            matched_by=match.matched_by,
            total_elements_scanned=snapshot.stats.total_elements,
            was_visible=el.visible if el is not None else False,
        )
        if el is not None and el.visible:
            return CheckOutcome(passed=False, error=f"Element is still visible: {desc}", data=data)
        return CheckOutcome(passed=True, data=data)

    return _evaluate


async def _visible(
    ctx: VerifyContext,
    kind: str,
    *,
    session_id: str,
    target: ElementTarget,
    require_enabled: bool,
    device_id: Optional[str],
    assertion_id: Optional[str],
    polling: Optional[PollingOptions],
    capture_on_failure: bool,
    capture_on_success: bool,
    bundle_id: Optional[str],
    cancel: Optional[CancellationToken],
) -> OperationResult[VerificationResult[Any]]:
    desc = describe_target(target)

    def make_check(device: DeviceInfo):
        return element_check(
            ctx, device, session_id, target, _evaluate_visible(target, require_enabled)
        )

    def passed_message(data: ElementStateData) -> str:
        return f"Element is visible: {desc} (matched by {data.matched_by})"

    return await run_assertion(
        ctx,
        kind=kind,
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


async def _not_visible(
    ctx: VerifyContext,
    kind: str,
    *,
    session_id: str,
    target: ElementTarget,
    device_id: Optional[str],
    assertion_id: Optional[str],
    polling: Optional[PollingOptions],
    capture_on_failure: bool,
    capture_on_success: bool,
    bundle_id: Optional[str],
    cancel: Optional[CancellationToken],
) -> OperationResult[VerificationResult[Any]]:
    desc = describe_target(target)

    def make_check(device: DeviceInfo):
        return element_check(ctx, device, session_id, target, _evaluate_not_visible(target))

    def passed_message(data: ElementStateData) -> str:
        if data.element is None:
            return f"Element is not present: {desc}"
        return f"Element is present but not visible: {desc}"

    return await run_assertion(
        ctx,
        kind=kind,
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


async def assert_visible(
    ctx: VerifyContext,
    *,
    session_id: str,
    target: ElementTarget,
    require_enabled: bool = False,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    bundle_id: Optional[str] = None,
    cancel: Optional[CancellationToken] = None,
) -> OperationResult[VerificationResult[Any]]:
    return await _visible(
        ctx,
        "visible",
        session_id=session_id,
        target=target,
        require_enabled=require_enabled,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        bundle_id=bundle_id,
        cancel=cancel,
    )


async def assert_not_visible(
    ctx: VerifyContext,
    *,
    session_id: str,
    target: ElementTarget,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    bundle_id: Optional[str] = None,
    cancel: Optional[CancellationToken] = None,
) -> OperationResult[VerificationResult[Any]]:
    return await _not_visible(
        ctx,
        "not-visible",
        session_id=session_id,
        target=target,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        bundle_id=bundle_id,
        cancel=cancel,
    )


async def wait_for(
    ctx: VerifyContext,
    *,
    session_id: str,
    target: ElementTarget,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    bundle_id: Optional[str] = None,
    cancel: Optional[CancellationToken] = None,
) -> OperationResult[VerificationResult[Any]]:
    """Wait until the element is visible (same predicate as `assert_visible`)."""
    return await _visible(
        ctx,
        "wait-for",
        session_id=session_id,
        target=target,
        require_enabled=False,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        bundle_id=bundle_id,
        cancel=cancel,
    )


async def wait_for_not(
    ctx: VerifyContext,
    *,
    session_id: str,
    target: ElementTarget,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    bundle_id: Optional[str] = None,
    cancel: Optional[CancellationToken] = None,
) -> OperationResult[VerificationResult[Any]]:
    """Wait until the element is gone or hidden."""
    return await _not_visible(
        ctx,
        "wait-for-not",
        session_id=session_id,
        target=target,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        bundle_id=bundle_id,
        cancel=cancel,
    )


async def assert_visible_by_id(ctx: VerifyContext, identifier: str, **kwargs: Any):
    return await assert_visible(ctx, target=ElementTarget(identifier=identifier), **kwargs)


async def assert_visible_by_label(ctx: VerifyContext, label: str, **kwargs: Any):
    return await assert_visible(ctx, target=ElementTarget(label=label), **kwargs)


async def assert_visible_by_text(ctx: VerifyContext, text: str, **kwargs: Any):
    return await assert_visible(ctx, target=ElementTarget(text=text), **kwargs)


async def assert_not_visible_by_id(ctx: VerifyContext, identifier: str, **kwargs: Any):
    return await assert_not_visible(ctx, target=ElementTarget(identifier=identifier), **kwargs)


async def assert_not_visible_by_label(ctx: VerifyContext, label: str, **kwargs: Any):
    return await assert_not_visible(ctx, target=ElementTarget(label=label), **kwargs)


async def assert_not_visible_by_text(ctx: VerifyContext, text: str, **kwargs: Any):
    return await assert_not_visible(ctx, target=ElementTarget(text=text), **kwargs)
