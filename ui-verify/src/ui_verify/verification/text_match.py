from __future__ import annotations

import re
from typing import Optional

MATCH_EXACT = "exact"
MATCH_CONTAINS = "contains"
MATCH_REGEX = "regex"
MATCH_STARTS_WITH = "starts_with"
MATCH_ENDS_WITH = "ends_with"
MATCH_EMPTY = "empty"
MATCH_NOT_EMPTY = "not_empty"

TEXT_MATCH_MODES = (MATCH_EXACT, MATCH_CONTAINS, MATCH_REGEX, MATCH_STARTS_WITH, MATCH_ENDS_WITH)
VALUE_MATCH_MODES = TEXT_MATCH_MODES + (MATCH_EMPTY, MATCH_NOT_EMPTY)

_ALIASES = {
    "equals": MATCH_EXACT,
    "startsWith": MATCH_STARTS_WITH,
    "endsWith": MATCH_ENDS_WITH,
    "notEmpty": MATCH_NOT_EMPTY,
}


class InvalidPatternError(ValueError):
    pass


def normalize_mode(mode: Optional[str], *, default: str = MATCH_EXACT) -> str:
    if not mode:
        return default
    mode = _ALIASES.get(mode, mode)
    if mode not in VALUE_MATCH_MODES:
        raise ValueError(f"unknown match mode: {mode}")
    return mode


def text_matches(
    actual: Optional[str],
    expected: Optional[str],
    *,
    mode: str = MATCH_EXACT,
    case_sensitive: bool = True,
) -> bool:
    """Compare `actual` to `expected` under `mode`.

    Raises `InvalidPatternError` for a malformed regex so callers can report
    it as a non-retryable failure.
    """
    mode = normalize_mode(mode)
    if mode == MATCH_EMPTY:
        return not actual
    if mode == MATCH_NOT_EMPTY:
        return bool(actual)
    if actual is None or expected is None:
        return False

    if mode == MATCH_REGEX:
        try:
            rx = re.compile(expected, 0 if case_sensitive else re.IGNORECASE)
        except re.error as e:
            raise InvalidPatternError(f"Invalid regex {expected!r}: {e}") from e
        return rx.search(actual) is not None

    if not case_sensitive:
        actual = actual.lower()
        expected = expected.lower()
    if mode == MATCH_EXACT:
        return actual == expected
    if mode == MATCH_CONTAINS:
        return expected in actual
    if mode == MATCH_STARTS_WITH:
        return actual.startswith(expected)
    return actual.endswith(expected)


def describe_expectation(expected: Optional[str], mode: str) -> str:
    mode = normalize_mode(mode)
    if mode == MATCH_EMPTY:
        return "to be empty"
    if mode == MATCH_NOT_EMPTY:
        return "to be non-empty"
    if mode == MATCH_REGEX:
        return f"to match /{expected}/"
    verb = {
        MATCH_EXACT: "to equal",
        MATCH_CONTAINS: "to contain",
        MATCH_STARTS_WITH: "to start with",
        MATCH_ENDS_WITH: "to end with",
    }[mode]
    return f'{verb} "{expected}"'
