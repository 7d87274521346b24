from __future__ import annotations

from typing import Any, Iterable, Optional

from ui_verify.assertions.base import VerifyContext
from ui_verify.assertions.no_errors import assert_no_errors
from ui_verify.verification.patterns import CRASH_PATTERNS, PatternLike


async def assert_no_crash(
    ctx: VerifyContext,
    *,
    session_id: str,
    bundle_id: Optional[str] = None,
    extra_patterns: Optional[Iterable[PatternLike]] = None,
    **kwargs: Any,
):
    """Fail when the log window shows a crash signature for the app.

    Only crash patterns are used; generic error keywords are not. Runs once
    unless `polling` is given.
    """
    patterns = list(CRASH_PATTERNS) + list(extra_patterns or ())
    patterns += list(kwargs.pop("patterns", None) or ())
    kwargs.pop("custom_patterns_only", None)
    kwargs.setdefault("kind", "no-crash")
    # crash lines are not always logged at error level (e.g. "has died")
    kwargs.setdefault("log_level", None)
    return await assert_no_errors(
        ctx,
        session_id=session_id,
        bundle_id=bundle_id,
        patterns=patterns,
        custom_patterns_only=True,
        **kwargs,
    )
