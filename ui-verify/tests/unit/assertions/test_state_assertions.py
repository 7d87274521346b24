from __future__ import annotations

import asyncio
from pathlib import Path

from fakes import FakeBackend, app, el

from ui_verify.assertions import (
    VerifyContext,
    assert_disabled,
    assert_enabled,
    assert_enabled_by_label,
    assert_hittable,
    assert_not_hittable,
    assert_not_selected,
    assert_selected,
    assert_selected_by_id,
)
from ui_verify.elements import ElementTarget, Frame
from ui_verify.verification.polling import PollingOptions
from ui_verify.verification.results import VerificationStatus

FAST = PollingOptions(timeout_ms=100, poll_interval_ms=20)


def _run(coro):
    return asyncio.run(coro)


def _ctx(tree, tmp_path: Path) -> VerifyContext:
    return VerifyContext.create(FakeBackend(trees=[tree]), artifacts_dir=tmp_path)


def test_enabled_and_disabled(tmp_path: Path) -> None:
    tree = app(el(identifier="submit", enabled=False), el(identifier="cancel"))
    ctx = _ctx(tree, tmp_path)
    target = ElementTarget(identifier="submit")

    res = _run(assert_disabled(ctx, session_id="s", target=target, polling=FAST))
    assert res.data.passed is True
    assert res.data.data.was_enabled is False
    assert res.data.type == "disabled"

    res = _run(assert_enabled(ctx, session_id="s", target=target, polling=FAST))
    assert res.data.status is VerificationStatus.TIMEOUT
    assert res.data.message.endswith('Element found but not enabled: identifier="submit"')

    res = _run(assert_disabled(ctx, session_id="s", target=ElementTarget(identifier="cancel"), polling=FAST))
    assert "Element is still enabled" in res.data.message


def test_state_requires_visibility_by_default(tmp_path: Path) -> None:
    ctx = _ctx(app(el(label="Continue", visible=False)), tmp_path)

    res = _run(assert_enabled_by_label(ctx, "Continue", session_id="s", polling=FAST))
    assert res.data.passed is False
    assert "Element found but not visible" in res.data.message
    assert res.data.data.visibility_required is True

    res = _run(
        assert_enabled_by_label(ctx, "Continue", session_id="s", polling=FAST, require_visible=False)
    )
    assert res.data.passed is True


def test_selected_and_not_selected(tmp_path: Path) -> None:
    tree = app(
        el("Tab", identifier="home", selected=True),
        el("Tab", identifier="settings"),
    )
    ctx = _ctx(tree, tmp_path)

    assert _run(assert_selected_by_id(ctx, "home", session_id="s", polling=FAST)).data.passed
    res = _run(
        assert_not_selected(ctx, session_id="s", target=ElementTarget(identifier="home"), polling=FAST)
    )
    assert res.data.passed is False
    assert "Element is still selected" in res.data.message

    res = _run(
        assert_selected(ctx, session_id="s", target=ElementTarget(identifier="settings"), polling=FAST)
    )
    assert "Element found but not selected" in res.data.message
    assert res.data.data.was_selected is False


def test_hittable_requires_area_and_enabled(tmp_path: Path) -> None:
    tree = app(
        el(identifier="go"),
        el(identifier="collapsed", frame=Frame(0, 0, 0, 0)),
        el(identifier="hidden", visible=False),
    )
    ctx = _ctx(tree, tmp_path)

    res = _run(assert_hittable(ctx, session_id="s", target=ElementTarget(identifier="go"), polling=FAST))
    assert res.data.passed is True
    assert res.data.data.was_hittable is True

    res = _run(
        assert_hittable(ctx, session_id="s", target=ElementTarget(identifier="collapsed"), polling=FAST)
    )
    assert "Element found but not hittable" in res.data.message


def test_not_hittable_accepts_invisible_elements(tmp_path: Path) -> None:
    ctx = _ctx(app(el(identifier="hidden", visible=False)), tmp_path)

    res = _run(
        assert_not_hittable(ctx, session_id="s", target=ElementTarget(identifier="hidden"), polling=FAST)
    )
    assert res.data.passed is True
    assert res.data.type == "not-hittable"


def test_missing_element_fails_state_assertions(tmp_path: Path) -> None:
    ctx = _ctx(app(), tmp_path)
    res = _run(assert_enabled(ctx, session_id="s", target=ElementTarget(text="nothing"), polling=FAST))
    assert res.data.passed is False
    assert res.data.message.endswith('Element not found: text="nothing"')


def test_selected_times_out_when_state_never_changes(tmp_path: Path) -> None:
    backend = FakeBackend(trees=[app(el("Tab", identifier="settings"))])
    res = _run(
        assert_selected(
            VerifyContext.create(backend, artifacts_dir=tmp_path),
            session_id="s",
            target=ElementTarget(identifier="settings"),
            polling=PollingOptions(timeout_ms=500, poll_interval_ms=100),
        )
    )

    assert res.success is True
    result = res.data
    assert result.status is VerificationStatus.TIMEOUT
    assert result.passed is False
    assert 400 <= result.duration_ms <= 700
    assert [a.attempt for a in result.attempts] == list(range(1, len(result.attempts) + 1))
    assert 3 <= len(result.attempts) <= 6
    assert backend.inspect_calls == len(result.attempts)
