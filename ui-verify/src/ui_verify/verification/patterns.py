"""Log pattern scanning.

Entries are scanned in order. An entry that matches any ignore pattern is
skipped entirely; otherwise the first error pattern that hits produces a
`MatchedError` with surrounding context lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Union

from ui_verify.device.base import LogEntry

PatternLike = Union[str, "re.Pattern[str]"]

DEFAULT_ERROR_PATTERNS: tuple = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        # generic keywords
        r"\berror\b",
        r"\bfailed\b",
        r"\bexception\b",
        r"\bcrash\b",
        r"\bfatal\b",
        r"\bassert(?:ion)?(?:\s+)?fail(?:ed|ure)?\b",
        # native signals and runtime traps
        r"\bEXC_BAD_ACCESS\b",
        r"\bSIGABRT\b",
        r"\bSIGSEGV\b",
        r"\bNSException\b",
        r"\bfatalError\b",
        r"\bpreconditionFailure\b",
        r"\bunexpected(?:ly)?\s+(?:found\s+)?nil\b",
        r"\bforced\s+unwrap(?:ping)?\b",
        r"\bFATAL\s+EXCEPTION\b",
        r"\bANR\s+in\b",
        # network / api
        r"HTTP\s+(?:error|status)?\s*[45]\d{2}",
        r"\bAPI\s+(?:error|failure)\b",
        r"\bnetwork\s+error\b",
        r"\btimeout\b",
        r"\bout\s+of\s+memory\b",
    )
)

DEFAULT_IGNORE_PATTERNS: tuple = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\berror\s*domain",
        r"\bno\s+error",
        r"\bif\s+error",
        r"\berror\s*=\s*nil",
        r"\berror\s*==\s*nil",
        r"\bhandled\s+error",
        r"\bexpected\s+error",
        r"\bsuppress(?:ed)?\s+error",
        r"\bignore(?:d)?\s+error",
        r"\bdebug\b",
        r"CoreData.*error",
        r"URLSession.*error",
    )
)

CRASH_PATTERNS: tuple = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bcrash(?:ed)?\b",
        r"\bSIGABRT\b",
        r"\bSIGSEGV\b",
        r"\bSIGBUS\b",
        r"\bSIGKILL\b",
        r"\bEXC_BAD_ACCESS\b",
        r"\bEXC_CRASH\b",
        r"\bfatal\s*error\b",
        r"\bterminated\s+due\s+to\b",
        r"\bFATAL\s+EXCEPTION\b",
        r"\bANR\s+in\b",
        r"\bProcess\s+\S+\s+\(pid\s+\d+\)\s+has\s+died\b",
    )
)

HTTP_ERROR_PATTERNS: tuple = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"HTTP\s+(?:error|status)?\s*[45]\d{2}",
        r"\bstatus(?:\s*code)?\s*[:=]?\s*[45]\d{2}\b",
        r"\b[45]\d{2}\s+(?:Bad Request|Unauthorized|Forbidden|Not Found"
        r"|Internal Server Error|Bad Gateway|Service Unavailable)\b",
    )
)


def compile_pattern(pattern: PatternLike) -> "re.Pattern[str]":
    """Strings are literal and case-insensitive; compiled patterns are kept as-is."""
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(re.escape(str(pattern)), re.IGNORECASE)


def resolve_patterns(
    defaults: Sequence["re.Pattern[str]"],
    custom: Optional[Iterable[PatternLike]] = None,
    *,
    custom_only: bool = False,
) -> List["re.Pattern[str]"]:
    """Defaults plus custom, or custom only when requested and supplied."""
    extra = [compile_pattern(p) for p in (custom or ())]
    if custom_only and extra:
        return extra
    return list(defaults) + extra


def pattern_to_string(pattern: "re.Pattern[str]") -> str:
    return pattern.pattern


@dataclass(frozen=True)
class MatchedError:
    entry: LogEntry
    matched_pattern: str
    matched_text: str
    context_before: List[LogEntry] = field(default_factory=list)
    context_after: List[LogEntry] = field(default_factory=list)


@dataclass(frozen=True)
class ScanResult:
    matches: List[MatchedError]
    total_scanned: int
    total_matches: int


def is_ignored(message: str, ignore_patterns: Sequence["re.Pattern[str]"]) -> bool:
    return any(p.search(message) for p in ignore_patterns)


def first_match(
    message: str, patterns: Sequence["re.Pattern[str]"]
) -> Optional["tuple[re.Pattern[str], re.Match[str]]"]:
    for p in patterns:
        m = p.search(message)
        if m:
            return p, m
    return None


def scan_log_entries(
    entries: Sequence[LogEntry],
    *,
    error_patterns: Sequence["re.Pattern[str]"],
    ignore_patterns: Sequence["re.Pattern[str]"] = (),
    max_errors: int = 10,
    context_lines: int = 2,
) -> ScanResult:
    """Collect up to `max_errors` matches; `total_matches` counts every hit."""
    matches: List[MatchedError] = []
    total = 0
    for idx, entry in enumerate(entries):
        if is_ignored(entry.message, ignore_patterns):
            continue
        hit = first_match(entry.message, error_patterns)
        if hit is None:
            continue
        total += 1
        if len(matches) >= max_errors:
            continue
        pattern, m = hit
        before = list(entries[max(0, idx - context_lines) : idx]) if context_lines > 0 else []
        after = list(entries[idx + 1 : idx + 1 + context_lines]) if context_lines > 0 else []
        matches.append(
            MatchedError(
                entry=entry,
                matched_pattern=pattern_to_string(pattern),
                matched_text=m.group(0),
                context_before=before,
                context_after=after,
            )
        )
    return ScanResult(matches=matches, total_scanned=len(entries), total_matches=total)


def count_matches(
    entries: Sequence[LogEntry],
    *,
    error_patterns: Sequence["re.Pattern[str]"],
    ignore_patterns: Sequence["re.Pattern[str]"] = (),
) -> int:
    return sum(
        1
        for e in entries
        if not is_ignored(e.message, ignore_patterns) and first_match(e.message, error_patterns)
    )
