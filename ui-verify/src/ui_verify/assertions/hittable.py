"""Hittability: visible, enabled and with a non-zero frame area."""

from __future__ import annotations

from typing import Any

from ui_verify.assertions.base import VerifyContext
from ui_verify.assertions.state import StateRule, assert_state
from ui_verify.elements import ElementTarget

HITTABLE = StateRule(
    kind="hittable",
    attribute="hittable",
    expected=True,
    failure="Element found but not hittable",
    success="Element is hittable",
)
NOT_HITTABLE = StateRule(
    kind="not-hittable",
    attribute="hittable",
    expected=False,
    failure="Element is still hittable",
    success="Element is not hittable",
)


async def assert_hittable(ctx: VerifyContext, *, target: ElementTarget, **kwargs: Any):
    return await assert_state(ctx, HITTABLE, target=target, **kwargs)


async def assert_not_hittable(
    ctx: VerifyContext, *, target: ElementTarget, require_visible: bool = False, **kwargs: Any
):
    # An invisible element is not hittable, so visibility is not required here.
    return await assert_state(
        ctx, NOT_HITTABLE, target=target, require_visible=require_visible, **kwargs
    )


async def assert_hittable_by_id(ctx: VerifyContext, identifier: str, **kwargs: Any):
    return await assert_hittable(ctx, target=ElementTarget(identifier=identifier), **kwargs)


async def assert_not_hittable_by_id(ctx: VerifyContext, identifier: str, **kwargs: Any):
    return await assert_not_hittable(ctx, target=ElementTarget(identifier=identifier), **kwargs)
