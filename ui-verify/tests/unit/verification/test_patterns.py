from __future__ import annotations

import re

from fakes import log

from ui_verify.verification.patterns import (
    CRASH_PATTERNS,
    DEFAULT_ERROR_PATTERNS,
    DEFAULT_IGNORE_PATTERNS,
    compile_pattern,
    count_matches,
    resolve_patterns,
    scan_log_entries,
)


def test_compile_pattern_escapes_strings_case_insensitively() -> None:
    p = compile_pattern("value (x)")
    assert p.search("VALUE (X) here")
    assert not p.search("value x")

    rx = re.compile(r"\d+")
    assert compile_pattern(rx) is rx


def test_resolve_patterns_merges_or_replaces() -> None:
    merged = resolve_patterns(DEFAULT_ERROR_PATTERNS, ["boom"])
    assert len(merged) == len(DEFAULT_ERROR_PATTERNS) + 1

    only = resolve_patterns(DEFAULT_ERROR_PATTERNS, ["boom"], custom_only=True)
    assert [p.pattern for p in only] == ["boom"]

    # custom_only without custom patterns keeps the defaults
    assert resolve_patterns(DEFAULT_ERROR_PATTERNS, None, custom_only=True) == list(
        DEFAULT_ERROR_PATTERNS
    )


def test_scan_skips_ignored_entries() -> None:
    entries = [
        log("request finished with no error"),
        log("Debug: error counters reset"),
        log("Network error while fetching feed"),
    ]
    res = scan_log_entries(
        entries,
        error_patterns=DEFAULT_ERROR_PATTERNS,
        ignore_patterns=DEFAULT_IGNORE_PATTERNS,
    )
    assert res.total_scanned == 3
    assert res.total_matches == 1
    assert res.matches[0].entry.message == "Network error while fetching feed"
    assert res.matches[0].matched_text.lower() == "error"


def test_nil_error_success_line_is_ignored() -> None:
    res = scan_log_entries(
        [log("error = nil, request successful")],
        error_patterns=DEFAULT_ERROR_PATTERNS,
        ignore_patterns=DEFAULT_IGNORE_PATTERNS,
    )
    assert res.matches == []
    assert res.total_scanned == 1


def test_scan_respects_max_errors_but_counts_all() -> None:
    entries = [log(f"error #{i}") for i in range(5)]
    res = scan_log_entries(entries, error_patterns=DEFAULT_ERROR_PATTERNS, max_errors=2)
    assert len(res.matches) == 2
    assert res.total_matches == 5


def test_scan_collects_context_lines() -> None:
    entries = [log("a"), log("b"), log("c"), log("exception thrown"), log("d"), log("e"), log("f")]
    res = scan_log_entries(entries, error_patterns=DEFAULT_ERROR_PATTERNS, context_lines=2)
    m = res.matches[0]
    assert [e.message for e in m.context_before] == ["b", "c"]
    assert [e.message for e in m.context_after] == ["d", "e"]

    res = scan_log_entries(entries, error_patterns=DEFAULT_ERROR_PATTERNS, context_lines=0)
    assert res.matches[0].context_before == []
    assert res.matches[0].context_after == []


def test_crash_patterns_cover_android_runtime() -> None:
    entries = [
        log("FATAL EXCEPTION: main", process="AndroidRuntime"),
        log("ANR in com.example.app", process="ActivityManager"),
        log("Process com.example.app (pid 4242) has died", process="ActivityManager"),
        log("layout pass complete", process="ViewRootImpl"),
    ]
    assert count_matches(entries, error_patterns=CRASH_PATTERNS) == 3
