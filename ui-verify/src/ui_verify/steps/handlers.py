"""Built-in step handlers: map step mappings onto assertion calls."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from ui_verify.assertions.base import VerifyContext
from ui_verify.assertions.crash import assert_no_crash
from ui_verify.assertions.enabled import assert_disabled, assert_enabled
from ui_verify.assertions.hittable import assert_hittable, assert_not_hittable
from ui_verify.assertions.logs import assert_log_contains, assert_log_not_contains
from ui_verify.assertions.no_errors import assert_no_errors, assert_no_http_errors
from ui_verify.assertions.screen import assert_screen, assert_screen_by_name, parse_screen_definition
from ui_verify.assertions.selected import assert_not_selected, assert_selected
from ui_verify.assertions.text import assert_text
from ui_verify.assertions.value import assert_value
from ui_verify.assertions.visible import assert_not_visible, assert_visible, wait_for, wait_for_not
from ui_verify.steps.registry import StepEnv, register_step
from ui_verify.steps.targets import parse_target
from ui_verify.verification.polling import PollingOptions
from ui_verify.verification.results import OperationResult


def _polling(ctx: VerifyContext, step: Mapping[str, Any]) -> Optional[PollingOptions]:
    if "timeout" not in step and "poll_interval" not in step:
        return None
    return PollingOptions(
        timeout_ms=int(step.get("timeout", ctx.config.timeout_ms)),
        poll_interval_ms=int(step.get("poll_interval", ctx.config.poll_interval_ms)),
        description=step.get("description"),
    )


def _common(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {
        "session_id": env.session_id,
        "device_id": env.device_id,
        "polling": _polling(ctx, step),
        "bundle_id": step.get("bundle_id", env.bundle_id),
    }
    for key in ("capture_on_failure", "capture_on_success"):
        if key in step:
            kwargs[key] = bool(step[key])
    return kwargs


def _require(step: Mapping[str, Any], key: str) -> Any:
    if key not in step:
        raise ValueError(f"step {step.get('type')} requires '{key}'")
    return step[key]


def _element_kwargs(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv) -> Dict[str, Any]:
    kwargs = _common(ctx, step, env)
    kwargs["target"] = parse_target(_require(step, "target"))
    return kwargs


def _with_require_visible(kwargs: Dict[str, Any], step: Mapping[str, Any]) -> Dict[str, Any]:
    if "require_visible" in step:
        kwargs["require_visible"] = bool(step["require_visible"])
    return kwargs


@register_step("assert_visible")
async def _assert_visible(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_visible(
        ctx,
        require_enabled=bool(step.get("require_enabled", False)),
        **_element_kwargs(ctx, step, env),
    )


@register_step("assert_not_visible")
async def _assert_not_visible(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_not_visible(ctx, **_element_kwargs(ctx, step, env))


@register_step("wait_for")
async def _wait_for(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await wait_for(ctx, **_element_kwargs(ctx, step, env))


@register_step("wait_for_not")
async def _wait_for_not(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await wait_for_not(ctx, **_element_kwargs(ctx, step, env))


@register_step("assert_text")
async def _assert_text(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_text(
        ctx,
        expected=str(_require(step, "expected")),
        match_mode=step.get("match", "exact"),
        case_sensitive=bool(step.get("case_sensitive", True)),
        **_element_kwargs(ctx, step, env),
    )


@register_step("assert_value")
async def _assert_value(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_value(
        ctx,
        expected=step.get("expected"),
        match_mode=step.get("match", "exact"),
        case_sensitive=bool(step.get("case_sensitive", True)),
        **_element_kwargs(ctx, step, env),
    )


@register_step("assert_enabled")
async def _assert_enabled(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_enabled(ctx, **_with_require_visible(_element_kwargs(ctx, step, env), step))


@register_step("assert_disabled")
async def _assert_disabled(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_disabled(
        ctx, **_with_require_visible(_element_kwargs(ctx, step, env), step)
    )


@register_step("assert_selected")
async def _assert_selected(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_selected(
        ctx, **_with_require_visible(_element_kwargs(ctx, step, env), step)
    )


@register_step("assert_not_selected")
async def _assert_not_selected(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_not_selected(
        ctx, **_with_require_visible(_element_kwargs(ctx, step, env), step)
    )


@register_step("assert_hittable")
async def _assert_hittable(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_hittable(
        ctx, **_with_require_visible(_element_kwargs(ctx, step, env), step)
    )


@register_step("assert_not_hittable")
async def _assert_not_hittable(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_not_hittable(
        ctx, **_with_require_visible(_element_kwargs(ctx, step, env), step)
    )


def _since(step: Mapping[str, Any]) -> Optional[datetime]:
    if "since_seconds" not in step:
        return None
    return datetime.now(timezone.utc) - timedelta(seconds=float(step["since_seconds"]))


def _log_kwargs(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv) -> Dict[str, Any]:
    kwargs = _common(ctx, step, env)
    kwargs["since"] = _since(step)
    return kwargs


@register_step("assert_log_contains")
async def _assert_log_contains(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_log_contains(
        ctx,
        pattern=str(_require(step, "pattern")),
        match_mode=step.get("match", "contains"),
        case_sensitive=bool(step.get("case_sensitive", False)),
        **_log_kwargs(ctx, step, env),
    )


@register_step("assert_log_not_contains")
async def _assert_log_not_contains(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_log_not_contains(
        ctx,
        pattern=str(_require(step, "pattern")),
        match_mode=step.get("match", "contains"),
        case_sensitive=bool(step.get("case_sensitive", False)),
        **_log_kwargs(ctx, step, env),
    )


@register_step("assert_no_errors")
async def _assert_no_errors(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    kwargs = _log_kwargs(ctx, step, env)
    if "max_errors" in step:
        kwargs["max_errors"] = int(step["max_errors"])
    return await assert_no_errors(
        ctx,
        patterns=step.get("patterns"),
        ignore_patterns=step.get("ignore_patterns"),
        custom_patterns_only=bool(step.get("custom_patterns_only", False)),
        **kwargs,
    )


@register_step("assert_no_http_errors")
async def _assert_no_http_errors(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_no_http_errors(ctx, **_log_kwargs(ctx, step, env))


@register_step("assert_no_crash")
async def _assert_no_crash(ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv):
    return await assert_no_crash(
        ctx, extra_patterns=step.get("patterns"), **_log_kwargs(ctx, step, env)
    )


@register_step("assert_screen")
async def _assert_screen(
    ctx: VerifyContext, step: Mapping[str, Any], env: StepEnv
) -> OperationResult:
    screen = _require(step, "screen")
    kwargs = _common(ctx, step, env)
    kwargs["require_all"] = bool(step.get("require_all", True))
    if isinstance(screen, Mapping):
        return await assert_screen(ctx, screen=parse_screen_definition(screen), **kwargs)
    return await assert_screen_by_name(ctx, str(screen), env.screens, **kwargs)
