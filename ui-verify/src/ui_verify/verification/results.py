"""Result model: the two-tier wrapper and the inner verification result."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar

from ui_verify.device.base import DeviceInfo
from ui_verify.errors import ErrorCode, UiVerifyError
from ui_verify.verification.polling import STOP_TIMEOUT, PollOutcome, VerificationAttempt

T = TypeVar("T")


class VerificationStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class VerificationArtifacts:
    screenshots: List[Path] = field(default_factory=list)
    directory: Optional[Path] = None


@dataclass(frozen=True)
class VerificationResult(Generic[T]):
    id: str
    type: str
    target: str
    status: VerificationStatus
    passed: bool
    message: str
    start_time: datetime
    duration_ms: int
    attempts: List[VerificationAttempt]
    device: Optional[DeviceInfo] = None
    artifacts: Optional[VerificationArtifacts] = None
    data: Optional[T] = None


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outer result: did the check run at all.

    `success=False` means the condition could not be evaluated (no device,
    snapshot failure...). An evaluated-but-unsatisfied assertion is
    `success=True` with `data.passed=False`.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, data: T) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, code: ErrorCode) -> "OperationResult[T]":
        return cls(success=False, error=error, error_code=code)

    @classmethod
    def from_error(cls, err: UiVerifyError) -> "OperationResult[T]":
        return cls(success=False, error=str(err), error_code=err.code)


def generate_verification_id(prefix: str = "verify") -> str:
    """Unique id of the form `<prefix>-<ms timestamp base36>-<random>`."""
    return f"{prefix}-{_base36(int(time.time() * 1000))}-{secrets.token_hex(3)}"


def _base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(digits[r])
    return "".join(reversed(out))


def create_passed_result(
    *,
    id: str,
    type: str,
    target: str,
    message: str,
    start_time: datetime,
    outcome: PollOutcome,
    device: Optional[DeviceInfo] = None,
    artifacts: Optional[VerificationArtifacts] = None,
    data: Any = None,
) -> VerificationResult[Any]:
    return VerificationResult(
        id=id,
        type=type,
        target=target,
        status=VerificationStatus.PASSED,
        passed=True,
        message=message,
        start_time=start_time,
        duration_ms=outcome.duration_ms,
        attempts=list(outcome.attempts),
        device=device,
        artifacts=artifacts,
        data=data,
    )


def create_failed_result(
    *,
    id: str,
    type: str,
    target: str,
    message: str,
    start_time: datetime,
    outcome: PollOutcome,
    device: Optional[DeviceInfo] = None,
    artifacts: Optional[VerificationArtifacts] = None,
    data: Any = None,
) -> VerificationResult[Any]:
    return VerificationResult(
        id=id,
        type=type,
        target=target,
        status=VerificationStatus.FAILED,
        passed=False,
        message=message,
        start_time=start_time,
        duration_ms=outcome.duration_ms,
        attempts=list(outcome.attempts),
        device=device,
        artifacts=artifacts,
        data=data,
    )


def create_timeout_result(
    *,
    id: str,
    type: str,
    target: str,
    timeout_ms: int,
    start_time: datetime,
    outcome: PollOutcome,
    device: Optional[DeviceInfo] = None,
    artifacts: Optional[VerificationArtifacts] = None,
    data: Any = None,
    detail: Optional[str] = None,
) -> VerificationResult[Any]:
    message = f"Timed out after {timeout_ms}ms waiting for {target}"
    if detail:
        message = f"{message}: {detail}"
    return VerificationResult(
        id=id,
        type=type,
        target=target,
        status=VerificationStatus.TIMEOUT,
        passed=False,
        message=message,
        start_time=start_time,
        duration_ms=outcome.duration_ms,
        attempts=list(outcome.attempts),
        device=device,
        artifacts=artifacts,
        data=data,
    )


def build_result(
    *,
    id: str,
    type: str,
    target: str,
    start_time: datetime,
    outcome: PollOutcome,
    timeout_ms: int,
    passed_message: str,
    failed_message: str,
    device: Optional[DeviceInfo] = None,
    artifacts: Optional[VerificationArtifacts] = None,
    data: Any = None,
) -> VerificationResult[Any]:
    """Pick the terminal shape for a poll outcome."""
    common: Dict[str, Any] = dict(
        id=id,
        type=type,
        target=target,
        start_time=start_time,
        outcome=outcome,
        device=device,
        artifacts=artifacts,
        data=data,
    )
    if outcome.passed:
        return create_passed_result(message=passed_message, **common)
    if outcome.stop_reason == STOP_TIMEOUT:
        return create_timeout_result(timeout_ms=timeout_ms, detail=failed_message, **common)
    return create_failed_result(message=failed_message, **common)
