"""Selection state of tabs, checkboxes, toggles and segmented controls."""

from __future__ import annotations

from typing import Any

from ui_verify.assertions.base import VerifyContext
from ui_verify.assertions.state import StateRule, assert_state
from ui_verify.elements import ElementTarget

SELECTED = StateRule(
    kind="selected",
    attribute="selected",
    expected=True,
    failure="Element found but not selected",
    success="Element is selected",
)
NOT_SELECTED = StateRule(
    kind="not-selected",
    attribute="selected",
    expected=False,
    failure="Element is still selected",
    success="Element is not selected",
)


async def assert_selected(ctx: VerifyContext, *, target: ElementTarget, **kwargs: Any):
    return await assert_state(ctx, SELECTED, target=target, **kwargs)


async def assert_not_selected(ctx: VerifyContext, *, target: ElementTarget, **kwargs: Any):
    return await assert_state(ctx, NOT_SELECTED, target=target, **kwargs)


async def assert_selected_by_id(ctx: VerifyContext, identifier: str, **kwargs: Any):
    return await assert_selected(ctx, target=ElementTarget(identifier=identifier), **kwargs)


async def assert_selected_by_label(ctx: VerifyContext, label: str, **kwargs: Any):
    return await assert_selected(ctx, target=ElementTarget(label=label), **kwargs)


async def assert_selected_by_text(ctx: VerifyContext, text: str, **kwargs: Any):
    return await assert_selected(ctx, target=ElementTarget(text=text), **kwargs)


async def assert_not_selected_by_id(ctx: VerifyContext, identifier: str, **kwargs: Any):
    return await assert_not_selected(ctx, target=ElementTarget(identifier=identifier), **kwargs)


async def assert_not_selected_by_label(ctx: VerifyContext, label: str, **kwargs: Any):
    return await assert_not_selected(ctx, target=ElementTarget(label=label), **kwargs)


async def assert_not_selected_by_text(ctx: VerifyContext, text: str, **kwargs: Any):
    return await assert_not_selected(ctx, target=ElementTarget(text=text), **kwargs)
