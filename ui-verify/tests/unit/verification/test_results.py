from __future__ import annotations

import re
from datetime import datetime, timezone

from ui_verify.errors import DeviceNotBootedError, ErrorCode
from ui_verify.verification.polling import STOP_FINAL, STOP_PASSED, STOP_TIMEOUT, PollOutcome
from ui_verify.verification.results import (
    OperationResult,
    VerificationStatus,
    build_result,
    generate_verification_id,
)

_START = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _build(outcome: PollOutcome):
    return build_result(
        id="v-1",
        type="visible",
        target='identifier="login"',
        start_time=_START,
        outcome=outcome,
        timeout_ms=5000,
        passed_message="Element visible",
        failed_message="Element not found",
    )


def test_build_result_shapes() -> None:
    passed = _build(PollOutcome(passed=True, duration_ms=12, stop_reason=STOP_PASSED))
    assert passed.status is VerificationStatus.PASSED
    assert passed.passed is True
    assert passed.message == "Element visible"

    timed_out = _build(PollOutcome(passed=False, duration_ms=5001, stop_reason=STOP_TIMEOUT))
    assert timed_out.status is VerificationStatus.TIMEOUT
    assert timed_out.passed is False
    assert timed_out.message == (
        'Timed out after 5000ms waiting for identifier="login": Element not found'
    )

    failed = _build(PollOutcome(passed=False, duration_ms=3, stop_reason=STOP_FINAL))
    assert failed.status is VerificationStatus.FAILED
    assert failed.message == "Element not found"


def test_status_values_are_wire_strings() -> None:
    assert [s.value for s in VerificationStatus] == ["passed", "failed", "timeout"]


def test_operation_result_from_error_carries_code() -> None:
    res = OperationResult.from_error(DeviceNotBootedError("No booted device"))
    assert res.success is False
    assert res.error == "No booted device"
    assert res.error_code is ErrorCode.DEVICE_NOT_BOOTED

    ok = OperationResult.ok(42)
    assert ok.success is True and ok.data == 42 and ok.error_code is None


def test_generate_verification_id_is_unique_and_prefixed() -> None:
    ids = {generate_verification_id("assert") for _ in range(50)}
    assert len(ids) == 50
    for i in ids:
        assert re.fullmatch(r"assert-[0-9a-z]+-[0-9a-f]{6}", i)
