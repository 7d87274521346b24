"""Log content assertions: a line matching a pattern does (or does not) appear."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from ui_verify.assertions.base import VerifyContext, run_assertion
from ui_verify.device.base import DeviceInfo, LogEntry
from ui_verify.errors import InvalidArgumentError
from ui_verify.verification.polling import CancellationToken, CheckOutcome, PollingOptions
from ui_verify.verification.results import OperationResult, VerificationResult
from ui_verify.verification.text_match import (
    MATCH_CONTAINS,
    TEXT_MATCH_MODES,
    InvalidPatternError,
    normalize_mode,
    text_matches,
)

DEFAULT_LOOKBACK = timedelta(seconds=60)
MAX_REPORTED_MATCHES = 10


@dataclass(frozen=True)
class LogMatchData:
    pattern: str
    match_mode: str
    case_sensitive: bool
    since_time: datetime
    match_count: int = 0
    total_logs_scanned: int = 0
    matches: List[LogEntry] = field(default_factory=list)


async def _log_assertion(
    ctx: VerifyContext,
    *,
    kind: str,
    expect_present: bool,
    session_id: str,
    pattern: str,
    match_mode: str,
    case_sensitive: bool,
    bundle_id: Optional[str],
    since: Optional[datetime],
    log_level: Optional[str],
    limit: int,
    device_id: Optional[str],
    assertion_id: Optional[str],
    polling: Optional[PollingOptions],
    single_check: bool,
    capture_on_failure: bool,
    capture_on_success: bool,
    cancel: Optional[CancellationToken],
) -> OperationResult[VerificationResult[Any]]:
    try:
        mode = normalize_mode(match_mode, default=MATCH_CONTAINS)
    except ValueError as e:
        return OperationResult.from_error(InvalidArgumentError(str(e)))
    if mode not in TEXT_MATCH_MODES:
        return OperationResult.from_error(
            InvalidArgumentError(f"unsupported log match mode: {match_mode}")
        )
    since_time = since if since is not None else datetime.now(timezone.utc) - DEFAULT_LOOKBACK
    target = f'log line {mode} "{pattern}"'

    def make_check(device: DeviceInfo):
        async def _check() -> CheckOutcome:
            entries = await ctx.backend.get_system_log(
                device_id=device.id,
                since=since_time,
                process_filter=bundle_id,
                level=log_level,
                limit=limit,
            )
            hits: List[LogEntry] = []
            for entry in entries:
                try:
                    ok = text_matches(
                        entry.message, pattern, mode=mode, case_sensitive=case_sensitive
                    )
                except InvalidPatternError as e:
                    return CheckOutcome(passed=False, error=str(e), final=True)
                if ok:
                    hits.append(entry)
            data = LogMatchData(
                pattern=pattern,
                match_mode=mode,
                case_sensitive=case_sensitive,
                since_time=since_time,
                match_count=len(hits),
                total_logs_scanned=len(entries),
                matches=hits[:MAX_REPORTED_MATCHES],
            )
            if expect_present and not hits:
                return CheckOutcome(
                    passed=False,
                    error=f"No log line matched ({len(entries)} scanned): {target}",
                    data=data,
                )
            if not expect_present and hits:
                return CheckOutcome(
                    passed=False,
                    error=f'Found {len(hits)} matching log line(s); first: "{hits[0].message}"',
                    data=data,
                )
            return CheckOutcome(passed=True, data=data)

        return _check

    def passed_message(data: LogMatchData) -> str:
        if expect_present:
            return f"Found {data.match_count} matching log line(s) for {target}"
        return f"No log line matched {target} ({data.total_logs_scanned} scanned)"

    return await run_assertion(
        ctx,
        kind=kind,
        target=target,
        session_id=session_id,
        make_check=make_check,
        passed_message=passed_message,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        single_check=single_check,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        cancel=cancel,
        bundle_id=bundle_id,
    )


async def assert_log_contains(
    ctx: VerifyContext,
    *,
    session_id: str,
    pattern: str,
    match_mode: str = MATCH_CONTAINS,
    case_sensitive: bool = False,
    bundle_id: Optional[str] = None,
    since: Optional[datetime] = None,
    log_level: Optional[str] = None,
    limit: int = 5000,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    cancel: Optional[CancellationToken] = None,
) -> OperationResult[VerificationResult[Any]]:
    """Poll the log window until a matching line appears."""
    return await _log_assertion(
        ctx,
        kind="log-contains",
        expect_present=True,
        session_id=session_id,
        pattern=pattern,
        match_mode=match_mode,
        case_sensitive=case_sensitive,
        bundle_id=bundle_id,
        since=since,
        log_level=log_level,
        limit=limit,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        single_check=False,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        cancel=cancel,
    )


async def assert_log_not_contains(
    ctx: VerifyContext,
    *,
    session_id: str,
    pattern: str,
    match_mode: str = MATCH_CONTAINS,
    case_sensitive: bool = False,
    bundle_id: Optional[str] = None,
    since: Optional[datetime] = None,
    log_level: Optional[str] = None,
    limit: int = 5000,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    cancel: Optional[CancellationToken] = None,
) -> OperationResult[VerificationResult[Any]]:
    """Check once (or poll, when `polling` is given) that no line matches."""
    return await _log_assertion(
        ctx,
        kind="log-not-contains",
        expect_present=False,
        session_id=session_id,
        pattern=pattern,
        match_mode=match_mode,
        case_sensitive=case_sensitive,
        bundle_id=bundle_id,
        since=since,
        log_level=log_level,
        limit=limit,
        device_id=device_id,
        assertion_id=assertion_id,
        polling=polling,
        single_check=polling is None,
        capture_on_failure=capture_on_failure,
        capture_on_success=capture_on_success,
        cancel=cancel,
    )
