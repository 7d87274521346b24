"""Log error scanning: no-errors, no-http-errors and point queries.

Without polling options the scan runs once. With polling options it keeps
re-reading the log window until it is clean or the timeout expires.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional

from ui_verify.assertions.base import VerifyContext, resolve_device, run_assertion
from ui_verify.device.base import DeviceInfo, LogEntry
from ui_verify.errors import UiVerifyError
from ui_verify.verification.patterns import (
    DEFAULT_ERROR_PATTERNS,
    DEFAULT_IGNORE_PATTERNS,
    HTTP_ERROR_PATTERNS,
    MatchedError,
    PatternLike,
    count_matches,
    pattern_to_string,
    resolve_patterns,
    scan_log_entries,
)
from ui_verify.verification.polling import (
    CancellationToken,
    CheckOutcome,
    PollingOptions,
    PollOutcome,
)
from ui_verify.verification.results import OperationResult, VerificationResult

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK = timedelta(seconds=60)
DEFAULT_LOG_LEVEL = "error"
DEFAULT_LOG_LIMIT = 5000
DEFAULT_COUNT_LIMIT = 1000
_PREVIEW_CHARS = 80


@dataclass(frozen=True)
class NoErrorsData:
    bundle_id: Optional[str]
    since_time: datetime
    until_time: datetime
    monitoring_duration_ms: int
    errors_found: bool
    error_count: int
    total_logs_scanned: int
    errors: List[MatchedError] = field(default_factory=list)
    patterns_used: List[str] = field(default_factory=list)
    ignore_patterns: List[str] = field(default_factory=list)


def _preview(message: str) -> str:
    if len(message) > _PREVIEW_CHARS:
        return message[:_PREVIEW_CHARS] + "..."
    return message


def _for_bundle(bundle_id: Optional[str]) -> str:
    return f' for "{bundle_id}"' if bundle_id else ""


def _since(since: Optional[datetime]) -> datetime:
    return since if since is not None else datetime.now(timezone.utc) - DEFAULT_LOOKBACK


async def assert_no_errors(
    ctx: VerifyContext,
    *,
    session_id: str,
    bundle_id: Optional[str] = None,
    since: Optional[datetime] = None,
    patterns: Optional[Iterable[PatternLike]] = None,
    ignore_patterns: Optional[Iterable[PatternLike]] = None,
    custom_patterns_only: bool = False,
    custom_ignore_patterns_only: bool = False,
    max_errors: int = 10,
    context_lines: int = 2,
    log_level: Optional[str] = DEFAULT_LOG_LEVEL,
    limit: int = DEFAULT_LOG_LIMIT,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    cancel: Optional[CancellationToken] = None,
    kind: str = "no-errors",
) -> OperationResult[VerificationResult[Any]]:
    error_patterns = resolve_patterns(
        DEFAULT_ERROR_PATTERNS, patterns, custom_only=custom_patterns_only
    )
    ignores = resolve_patterns(
        DEFAULT_IGNORE_PATTERNS, ignore_patterns, custom_only=custom_ignore_patterns_only
    )
    since_time = _since(since)
    target = f"logs{_for_bundle(bundle_id)}"

    def make_check(device: DeviceInfo):
        async def _check() -> CheckOutcome:
            entries = await ctx.backend.get_system_log(
                device_id=device.id,
                since=since_time,
                process_filter=bundle_id,
                level=log_level,
                limit=limit,
            )
            until_time = datetime.now(timezone.utc)
            scan = scan_log_entries(
                entries,
                error_patterns=error_patterns,
                ignore_patterns=ignores,
                max_errors=max_errors,
                context_lines=context_lines,
            )
            data = NoErrorsData(
                bundle_id=bundle_id,
                since_time=since_time,
                until_time=until_time,
                monitoring_duration_ms=int((until_time - since_time).total_seconds() * 1000),
                errors_found=bool(scan.matches),
                error_count=len(scan.matches),
                total_logs_scanned=scan.total_scanned,
                errors=scan.matches,
                patterns_used=[pattern_to_string(p) for p in error_patterns],
                ignore_patterns=[pattern_to_string(p) for p in ignores],
            )
            if not scan.matches:
                return CheckOutcome(passed=True, data=data)
            first = scan.matches[0].entry
            return CheckOutcome(
                passed=False,
                error=(
                    f"Found {len(scan.matches)} error(s) in logs{_for_bundle(bundle_id)}. "
                    f'First at {first.timestamp.isoformat()}: "{_preview(first.message)}"'
                ),
                data=data,
            )

        return _check

    def passed_message(data: NoErrorsData) -> str:
        return (
            f"No errors found in logs{_for_bundle(bundle_id)} "
            f"(scanned {data.total_logs_scanned} entries)"
        )

    def failed_message(outcome: PollOutcome) -> str:
        return outcome.last_error or f"Errors found in logs{_for_bundle(bundle_id)}"

    return await run_assertion(
        ctx,
        kind=kind,
        target=target,
        session_id=session_id,
        make_check=make_check,
        passed_message=passed_message,
        failed_message=failed_message,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        single_check=polling is None,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        failure_screenshot="error-state.png",
        cancel=cancel,
        bundle_id=bundle_id,
    )


async def assert_no_errors_for_app(ctx: VerifyContext, bundle_id: str, **kwargs: Any):
    return await assert_no_errors(ctx, bundle_id=bundle_id, **kwargs)


async def assert_no_http_errors(ctx: VerifyContext, **kwargs: Any):
    """Scan with the HTTP 4xx/5xx set only; `patterns` are added to it."""
    patterns = list(HTTP_ERROR_PATTERNS) + list(kwargs.pop("patterns", None) or ())
    kwargs.pop("custom_patterns_only", None)
    kwargs.setdefault("kind", "no-http-errors")
    return await assert_no_errors(
        ctx,
        patterns=patterns,
        custom_patterns_only=True,
        **kwargs,
    )


async def _fetch(
    ctx: VerifyContext,
    *,
    device_id: Optional[str],
    bundle_id: Optional[str],
    since: Optional[datetime],
    log_level: Optional[str],
    limit: int,
) -> List[LogEntry]:
    device = await resolve_device(ctx, device_id)
    return await ctx.backend.get_system_log(
        device_id=device.id,
        since=_since(since),
        process_filter=bundle_id,
        level=log_level,
        limit=limit,
    )


async def count_errors(
    ctx: VerifyContext,
    *,
    bundle_id: Optional[str] = None,
    since: Optional[datetime] = None,
    patterns: Optional[Iterable[PatternLike]] = None,
    ignore_patterns: Optional[Iterable[PatternLike]] = None,
    custom_patterns_only: bool = False,
    custom_ignore_patterns_only: bool = False,
    log_level: Optional[str] = DEFAULT_LOG_LEVEL,
    limit: int = DEFAULT_COUNT_LIMIT,
    device_id: Optional[str] = None,
) -> OperationResult[int]:
    """Count every matching (non-ignored) entry; no cap."""
    try:
        entries = await _fetch(
            ctx,
            device_id=device_id,
            bundle_id=bundle_id,
            since=since,
            log_level=log_level,
            limit=limit,
        )
    except UiVerifyError as e:
        return OperationResult.from_error(e)
    n = count_matches(
        entries,
        error_patterns=resolve_patterns(
            DEFAULT_ERROR_PATTERNS, patterns, custom_only=custom_patterns_only
        ),
        ignore_patterns=resolve_patterns(
            DEFAULT_IGNORE_PATTERNS, ignore_patterns, custom_only=custom_ignore_patterns_only
        ),
    )
    logger.debug("count_errors%s: %d", _for_bundle(bundle_id), n)
    return OperationResult.ok(n)


async def has_error_pattern(
    ctx: VerifyContext,
    pattern: PatternLike,
    *,
    bundle_id: Optional[str] = None,
    since: Optional[datetime] = None,
    log_level: Optional[str] = None,
    limit: int = DEFAULT_COUNT_LIMIT,
    device_id: Optional[str] = None,
) -> OperationResult[bool]:
    """True when any entry in the window matches `pattern` (ignore list not applied)."""
    try:
        entries = await _fetch(
            ctx,
            device_id=device_id,
            bundle_id=bundle_id,
            since=since,
            log_level=log_level,
            limit=limit,
        )
    except UiVerifyError as e:
        return OperationResult.from_error(e)
    found = count_matches(entries, error_patterns=resolve_patterns((), [pattern])) > 0
    return OperationResult.ok(found)
