"""Target shorthand parsing.

Step files refer to elements with compact strings:

  #login_button      identifier
  @Sign in           label (accessibility description)
  Button#submit      element of type Button with identifier submit
  "Welcome back"     text (quotes are stripped)
  Welcome back       text

Shorthand is parsed once here; the rest of the engine only sees
`ElementTarget`.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from ui_verify.elements import ElementQuery, ElementTarget

_TYPED_ID_RE = re.compile(r"^(?P<type>[A-Za-z][\w.]*)#(?P<id>\S.*)$")


class TargetParseError(ValueError):
    pass


def parse_target(raw: Any) -> ElementTarget:
    if isinstance(raw, ElementTarget):
        return raw
    if isinstance(raw, Mapping):
        return _from_mapping(raw)
    if not isinstance(raw, str):
        raise TargetParseError(f"target must be a string or mapping, got {type(raw).__name__}")

    s = raw.strip()
    if not s:
        raise TargetParseError("target must not be empty")

    if len(s) >= 2 and s[0] == s[-1] and s[0] in {'"', "'"}:
        text = s[1:-1]
        if not text:
            raise TargetParseError("quoted target must not be empty")
        return ElementTarget(text=text)
    if s.startswith("#"):
        if len(s) == 1:
            raise TargetParseError("identifier target must not be empty")
        return ElementTarget(identifier=s[1:])
    if s.startswith("@"):
        if len(s) == 1:
            raise TargetParseError("label target must not be empty")
        return ElementTarget(label=s[1:])
    m = _TYPED_ID_RE.match(s)
    if m:
        # Both constraints must hold on the same node; no state filtering.
        return ElementTarget(
            query=ElementQuery(
                identifier=m.group("id"),
                type=m.group("type"),
                visible=None,
                enabled=None,
            )
        )
    return ElementTarget(text=s)


def _from_mapping(raw: Mapping[str, Any]) -> ElementTarget:
    known = {"identifier", "id", "label", "text", "type"}
    unknown = set(raw) - known
    if unknown:
        raise TargetParseError(f"unknown target keys: {sorted(unknown)}")
    target = ElementTarget(
        identifier=raw.get("identifier", raw.get("id")),
        label=raw.get("label"),
        text=raw.get("text"),
        type=raw.get("type"),
    )
    if target.is_empty():
        raise TargetParseError("target mapping needs identifier, label, text or type")
    return target
