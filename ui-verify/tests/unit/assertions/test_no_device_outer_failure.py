from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from fakes import FakeBackend

from ui_verify.assertions import (
    VerifyContext,
    assert_disabled,
    assert_enabled,
    assert_hittable,
    assert_log_contains,
    assert_no_crash,
    assert_no_errors,
    assert_not_visible,
    assert_screen,
    assert_selected,
    assert_text,
    assert_value,
    assert_visible,
    create_screen_definition,
)
from ui_verify.elements import ElementTarget
from ui_verify.errors import ErrorCode

TARGET = ElementTarget(identifier="x")

CASES = [
    pytest.param(assert_visible, {"target": TARGET}, id="visible"),
    pytest.param(assert_not_visible, {"target": TARGET}, id="not_visible"),
    pytest.param(assert_enabled, {"target": TARGET}, id="enabled"),
    pytest.param(assert_disabled, {"target": TARGET}, id="disabled"),
    pytest.param(assert_selected, {"target": TARGET}, id="selected"),
    pytest.param(assert_hittable, {"target": TARGET}, id="hittable"),
    pytest.param(assert_text, {"target": TARGET, "expected": "x"}, id="text"),
    pytest.param(assert_value, {"target": TARGET, "expected": "x"}, id="value"),
    pytest.param(
        assert_screen,
        {"screen": create_screen_definition("login", ["#submit"])},
        id="screen",
    ),
    pytest.param(assert_no_errors, {}, id="no_errors"),
    pytest.param(assert_no_crash, {}, id="no_crash"),
    pytest.param(assert_log_contains, {"pattern": "x"}, id="log_contains"),
]


@pytest.mark.parametrize("assertion, kwargs", CASES)
def test_no_running_device_is_outer_failure(assertion, kwargs, tmp_path: Path) -> None:
    backend = FakeBackend(devices=[])
    ctx = VerifyContext.create(backend, artifacts_dir=tmp_path)

    res = asyncio.run(assertion(ctx, session_id="s", **kwargs))

    assert res.success is False
    assert res.data is None
    assert res.error_code is ErrorCode.DEVICE_NOT_BOOTED
    assert backend.inspect_calls == 0
    assert backend.log_calls == []
