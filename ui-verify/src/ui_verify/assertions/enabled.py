from __future__ import annotations

from typing import Any

from ui_verify.assertions.base import VerifyContext
from ui_verify.assertions.state import StateRule, assert_state
from ui_verify.elements import ElementTarget

ENABLED = StateRule(
    kind="enabled",
    attribute="enabled",
    expected=True,
    failure="Element found but not enabled",
    success="Element is enabled",
)
DISABLED = StateRule(
    kind="disabled",
    attribute="enabled",
    expected=False,
    failure="Element is still enabled",
    success="Element is disabled",
)


async def assert_enabled(ctx: VerifyContext, *, target: ElementTarget, **kwargs: Any):
    return await assert_state(ctx, ENABLED, target=target, **kwargs)


async def assert_disabled(ctx: VerifyContext, *, target: ElementTarget, **kwargs: Any):
    return await assert_state(ctx, DISABLED, target=target, **kwargs)


async def assert_enabled_by_id(ctx: VerifyContext, identifier: str, **kwargs: Any):
    return await assert_enabled(ctx, target=ElementTarget(identifier=identifier), **kwargs)


async def assert_enabled_by_label(ctx: VerifyContext, label: str, **kwargs: Any):
    return await assert_enabled(ctx, target=ElementTarget(label=label), **kwargs)


async def assert_enabled_by_text(ctx: VerifyContext, text: str, **kwargs: Any):
    return await assert_enabled(ctx, target=ElementTarget(text=text), **kwargs)


async def assert_disabled_by_id(ctx: VerifyContext, identifier: str, **kwargs: Any):
    return await assert_disabled(ctx, target=ElementTarget(identifier=identifier), **kwargs)


async def assert_disabled_by_label(ctx: VerifyContext, label: str, **kwargs: Any):
    return await assert_disabled(ctx, target=ElementTarget(label=label), **kwargs)


async def assert_disabled_by_text(ctx: VerifyContext, text: str, **kwargs: Any):
    return await assert_disabled(ctx, target=ElementTarget(text=text), **kwargs)
