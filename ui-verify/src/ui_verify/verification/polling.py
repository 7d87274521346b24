"""Bounded polling of an async check function.

`poll_until` runs the check at least once, stops on the first pass, and
otherwise retries every `poll_interval_ms` until the next attempt would no
longer fit in `timeout_ms`. Every attempt is recorded.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional

from ui_verify.config import DEFAULT_POLL_INTERVAL_MS, DEFAULT_TIMEOUT_MS
from ui_verify.errors import UiVerifyError

logger = logging.getLogger(__name__)

STOP_PASSED = "passed"
STOP_TIMEOUT = "timeout"
STOP_FINAL = "final"
STOP_CANCELLED = "cancelled"


@dataclass(frozen=True)
class PollingOptions:
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    description: Optional[str] = None


def merge_polling_options(
    options: Optional[PollingOptions] = None,
    *,
    timeout_ms: Optional[int] = None,
    poll_interval_ms: Optional[int] = None,
    description: Optional[str] = None,
) -> PollingOptions:
    """Fill unset fields from defaults; explicit keyword values win."""
    base = options or PollingOptions()
    return replace(
        base,
        timeout_ms=int(timeout_ms) if timeout_ms is not None else int(base.timeout_ms),
        poll_interval_ms=(
            int(poll_interval_ms) if poll_interval_ms is not None else int(base.poll_interval_ms)
        ),
        description=description if description is not None else base.description,
    )


@dataclass(frozen=True)
class CheckOutcome:
    """Return value of a single check.

    `final=True` marks a failure that retrying cannot fix (e.g. an invalid
    regex); polling stops immediately with status `failed`.
    """

    passed: bool
    error: Optional[str] = None
    data: Any = None
    final: bool = False


@dataclass(frozen=True)
class VerificationAttempt:
    attempt: int
    timestamp: datetime
    passed: bool
    duration_ms: int
    error: Optional[str] = None
    data: Any = None


@dataclass(frozen=True)
class PollOutcome:
    passed: bool
    duration_ms: int
    attempts: List[VerificationAttempt] = field(default_factory=list)
    last_data: Any = None
    stop_reason: str = STOP_TIMEOUT

    @property
    def last_error(self) -> Optional[str]:
        for att in reversed(self.attempts):
            if att.error:
                return att.error
        return None


class CancellationToken:
    """Cooperative cancellation for a running poll.

    `cancel()` wakes a poll that is sleeping between attempts; the poll stops
    at the next iteration boundary.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def sleep(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass


CheckFn = Callable[[], Awaitable[CheckOutcome]]


def _elapsed_ms(start: float) -> int:
    return int(round((time.monotonic() - start) * 1000))


async def poll_until(
    check: CheckFn,
    options: Optional[PollingOptions] = None,
    *,
    cancel: Optional[CancellationToken] = None,
) -> PollOutcome:
    """Drive `check` until it passes, times out or is cancelled.

    Exceptions raised by `check` are recorded as failed attempts and polling
    continues. `UiVerifyError` is an infrastructure failure and propagates.
    """

    opts = merge_polling_options(options)
    timeout_ms = max(0, int(opts.timeout_ms))
    interval_ms = max(1, int(opts.poll_interval_ms))
    label = opts.description or getattr(check, "__name__", "check")

    start = time.monotonic()
    attempts: List[VerificationAttempt] = []
    last_data: Any = None
    attempt_no = 0

    while True:
        if attempt_no > 0 and cancel is not None and cancel.cancelled:
            stop_reason = STOP_CANCELLED
            break

        attempt_no += 1
        attempt_start = time.monotonic()
        timestamp = datetime.now(timezone.utc)
        try:
            outcome = await check()
        except UiVerifyError:
            raise
        except Exception as e:  # transient: recorded and retried
            outcome = CheckOutcome(passed=False, error=f"{type(e).__name__}: {e}")

        if outcome.data is not None:
            last_data = outcome.data
        attempts.append(
            VerificationAttempt(
                attempt=attempt_no,
                timestamp=timestamp,
                passed=bool(outcome.passed),
                duration_ms=_elapsed_ms(attempt_start),
                error=outcome.error,
                data=outcome.data,
            )
        )
        logger.debug(
            "%s attempt %d: passed=%s error=%s",
            label,
            attempt_no,
            outcome.passed,
            outcome.error,
        )

        if outcome.passed:
            stop_reason = STOP_PASSED
            break
        if outcome.final:
            stop_reason = STOP_FINAL
            break
        if cancel is not None and cancel.cancelled:
            stop_reason = STOP_CANCELLED
            break
        if _elapsed_ms(start) + interval_ms > timeout_ms:
            stop_reason = STOP_TIMEOUT
            break

        if cancel is not None:
            await cancel.sleep(interval_ms / 1000.0)
        else:
            await asyncio.sleep(interval_ms / 1000.0)

    return PollOutcome(
        passed=stop_reason == STOP_PASSED,
        duration_ms=_elapsed_ms(start),
        attempts=attempts,
        last_data=last_data,
        stop_reason=stop_reason,
    )


async def check_once(check: CheckFn, *, description: Optional[str] = None) -> PollOutcome:
    """Run `check` exactly once; a failure is reported as `failed`, never `timeout`."""

    outcome = await poll_until(
        check, PollingOptions(timeout_ms=0, poll_interval_ms=1, description=description)
    )
    if outcome.passed:
        return outcome
    return replace(outcome, stop_reason=STOP_FINAL)
