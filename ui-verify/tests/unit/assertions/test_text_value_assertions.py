from __future__ import annotations

import asyncio
from pathlib import Path

from fakes import FakeBackend, app, el

from ui_verify.assertions import (
    VerifyContext,
    assert_text,
    assert_text_by_id,
    assert_text_contains,
    assert_text_matches,
    assert_value,
    assert_value_by_id,
    assert_value_empty,
    assert_value_not_empty,
)
from ui_verify.elements import ElementTarget
from ui_verify.errors import ErrorCode
from ui_verify.verification.polling import PollingOptions
from ui_verify.verification.results import VerificationStatus

FAST = PollingOptions(timeout_ms=100, poll_interval_ms=20)


def _ctx(tree, tmp_path: Path) -> VerifyContext:
    return VerifyContext.create(FakeBackend(trees=[tree]), artifacts_dir=tmp_path)


def _tree():
    return app(
        el("StaticText", identifier="greeting", label="Welcome, Ada"),
        el("TextField", identifier="email", value="ada@example.com"),
        el("TextField", identifier="notes"),
        el("StaticText", identifier="total", label="Total", value="$42.00"),
    )


def test_text_exact_and_case_insensitive(tmp_path: Path) -> None:
    ctx = _ctx(_tree(), tmp_path)

    res = asyncio.run(assert_text_by_id(ctx, "greeting", "Welcome, Ada", session_id="s", polling=FAST))
    assert res.data.passed is True
    assert res.data.data.matched_field == "label"

    res = asyncio.run(
        assert_text_by_id(
            ctx, "greeting", "welcome, ada", session_id="s", polling=FAST, case_sensitive=False
        )
    )
    assert res.data.passed is True


def test_text_falls_back_to_value(tmp_path: Path) -> None:
    ctx = _ctx(_tree(), tmp_path)
    res = asyncio.run(
        assert_text_contains(
            ctx, session_id="s", target=ElementTarget(identifier="total"), expected="42", polling=FAST
        )
    )
    assert res.data.passed is True
    assert res.data.data.matched_field == "value"
    assert res.data.data.actual_text == "$42.00"


def test_text_mismatch_reports_actual(tmp_path: Path) -> None:
    ctx = _ctx(_tree(), tmp_path)
    res = asyncio.run(
        assert_text(
            ctx,
            session_id="s",
            target=ElementTarget(identifier="greeting"),
            expected="Goodbye",
            polling=FAST,
        )
    )
    assert res.data.status is VerificationStatus.TIMEOUT
    assert 'Expected text to equal "Goodbye" but found "Welcome, Ada"' in res.data.message


def test_invalid_regex_fails_without_retry(tmp_path: Path) -> None:
    backend = FakeBackend(trees=[_tree()])
    ctx = VerifyContext.create(backend, artifacts_dir=tmp_path)
    res = asyncio.run(
        assert_text_matches(
            ctx,
            session_id="s",
            target=ElementTarget(identifier="greeting"),
            pattern="([unclosed",
            polling=PollingOptions(timeout_ms=5000, poll_interval_ms=20),
        )
    )
    assert res.success is True
    assert res.data.status is VerificationStatus.FAILED
    assert "Invalid regex" in res.data.message
    assert backend.inspect_calls == 1


def test_text_rejects_value_only_and_unknown_modes(tmp_path: Path) -> None:
    for mode in ("empty", "fuzzy"):
        backend = FakeBackend(trees=[_tree()])
        res = asyncio.run(
            assert_text(
                VerifyContext.create(backend, artifacts_dir=tmp_path),
                session_id="s",
                target=ElementTarget(identifier="greeting"),
                expected="",
                match_mode=mode,
            )
        )
        assert res.success is False
        assert res.error_code is ErrorCode.INVALID_ARGUMENT
        assert backend.inspect_calls == 0


def test_value_modes(tmp_path: Path) -> None:
    ctx = _ctx(_tree(), tmp_path)

    assert asyncio.run(
        assert_value_by_id(ctx, "email", "ada@example.com", session_id="s", polling=FAST)
    ).data.passed
    assert asyncio.run(
        assert_value(
            ctx,
            session_id="s",
            target=ElementTarget(identifier="email"),
            expected=r"^[^@]+@example\.com$",
            match_mode="regex",
            polling=FAST,
        )
    ).data.passed
    assert asyncio.run(
        assert_value_empty(ctx, session_id="s", target=ElementTarget(identifier="notes"), polling=FAST)
    ).data.passed

    res = asyncio.run(
        assert_value_not_empty(ctx, session_id="s", target=ElementTarget(identifier="notes"), polling=FAST)
    )
    assert res.data.passed is False
    assert 'Expected value to be non-empty but found ""' in res.data.message


def test_value_requires_expected_for_comparison_modes(tmp_path: Path) -> None:
    res = asyncio.run(
        assert_value(
            _ctx(_tree(), tmp_path),
            session_id="s",
            target=ElementTarget(identifier="email"),
            match_mode="contains",
        )
    )
    assert res.success is False
    assert res.error_code is ErrorCode.INVALID_ARGUMENT
    assert "expected is required" in res.error
