"""UI hierarchy data model.

A `UIElement` tree is one immutable snapshot of the screen. Trees are built by
a device backend on every poll attempt and discarded afterwards.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional, Sequence, Tuple, Union


def _safe_float(v: Any) -> float:
    try:
        if v is None or isinstance(v, bool):
            return 0.0
        return float(v)
    except (TypeError, ValueError):
        return 0.0


def parse_bool(v: Any) -> Optional[bool]:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)) and v in (0, 1):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in {"true", "t", "1", "yes", "y"}:
            return True
        if s in {"false", "f", "0", "no", "n"}:
            return False
    return None


def clean_text(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).replace("\u0000", "").strip()
    return s or None


@dataclass(frozen=True)
class Frame:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height

    @classmethod
    def from_bounds(cls, x1: float, y1: float, x2: float, y2: float) -> "Frame":
        return cls(x=x1, y=y1, width=max(0.0, x2 - x1), height=max(0.0, y2 - y1))


@dataclass(frozen=True)
class UIElement:
    type: str
    identifier: Optional[str] = None
    label: Optional[str] = None
    value: Optional[str] = None
    frame: Frame = field(default_factory=Frame)
    enabled: bool = True
    visible: bool = True
    selected: bool = False
    traits: Tuple[str, ...] = ()
    children: Tuple["UIElement", ...] = ()
    hint: Optional[str] = None
    placeholder: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UIElement":
        """Build a tree from a plain mapping (e.g. a JSON snapshot).

        Missing flags use the same defaults as the dataclass: enabled and
        visible default to True, selected to False.
        """
        frame_raw = data.get("frame")
        if isinstance(frame_raw, Mapping):
            frame = Frame(
                x=_safe_float(frame_raw.get("x")),
                y=_safe_float(frame_raw.get("y")),
                width=_safe_float(frame_raw.get("width")),
                height=_safe_float(frame_raw.get("height")),
            )
        else:
            frame = Frame()

        def flag(key: str, default: bool) -> bool:
            parsed = parse_bool(data.get(key))
            return default if parsed is None else parsed

        traits = data.get("traits") or ()
        if isinstance(traits, str):
            traits = (traits,)
        children = data.get("children") or ()
        return cls(
            type=clean_text(data.get("type")) or "Other",
            identifier=clean_text(data.get("identifier")),
            label=clean_text(data.get("label")),
            value=clean_text(data.get("value")),
            frame=frame,
            enabled=flag("enabled", True),
            visible=flag("visible", True),
            selected=flag("selected", False),
            traits=tuple(str(t) for t in traits),
            children=tuple(cls.from_dict(c) for c in children if isinstance(c, Mapping)),
            hint=clean_text(data.get("hint")),
            placeholder=clean_text(data.get("placeholder")),
        )

    def to_dict(self, *, include_children: bool = False) -> dict:
        out: dict = {
            "type": self.type,
            "identifier": self.identifier,
            "label": self.label,
            "value": self.value,
            "frame": {
                "x": self.frame.x,
                "y": self.frame.y,
                "width": self.frame.width,
                "height": self.frame.height,
            },
            "enabled": self.enabled,
            "visible": self.visible,
            "selected": self.selected,
            "traits": list(self.traits),
        }
        if include_children:
            out["children"] = [c.to_dict(include_children=True) for c in self.children]
        return out


def iter_elements(root: UIElement) -> Iterator[UIElement]:
    """Depth-first, pre-order traversal (document order)."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def count_elements(root: UIElement) -> int:
    return sum(1 for _ in iter_elements(root))


TextMatcher = Union[str, "re.Pattern[str]"]


@dataclass(frozen=True)
class ElementQuery:
    """Structured element query.

    Unlike the shorthand target categories, a query filters on visibility and
    enabled state by default. Pass `visible=None` / `enabled=None` to disable
    either filter.
    """

    identifier: Optional[TextMatcher] = None
    label: Optional[TextMatcher] = None
    value: Optional[TextMatcher] = None
    type: Union[str, Sequence[str], None] = None
    visible: Optional[bool] = True
    enabled: Optional[bool] = True
    contains_text: Optional[str] = None
    traits: Sequence[str] = ()
    predicate: Optional[Callable[[UIElement], bool]] = None

    def matches(self, element: UIElement) -> bool:
        if self.visible is not None and element.visible != self.visible:
            return False
        if self.enabled is not None and element.enabled != self.enabled:
            return False
        if self.type is not None:
            types = (self.type,) if isinstance(self.type, str) else tuple(self.type)
            if element.type not in types:
                return False
        if not _text_matches(element.identifier, self.identifier):
            return False
        if not _text_matches(element.label, self.label):
            return False
        if not _text_matches(element.value, self.value):
            return False
        if self.contains_text:
            needle = self.contains_text.lower()
            haystacks = (element.label, element.value, element.identifier)
            if not any(h and needle in h.lower() for h in haystacks):
                return False
        if self.traits:
            have = {t.lower() for t in element.traits}
            if not all(t.lower() in have for t in self.traits):
                return False
        if self.predicate is not None and not self.predicate(element):
            return False
        return True


def _text_matches(actual: Optional[str], expected: Optional[TextMatcher]) -> bool:
    if expected is None:
        return True
    if actual is None:
        return False
    if isinstance(expected, re.Pattern):
        return expected.search(actual) is not None
    return actual == expected


@dataclass(frozen=True)
class ElementTarget:
    """Selector for one element; at least one category should be set."""

    identifier: Optional[str] = None
    label: Optional[str] = None
    text: Optional[str] = None
    type: Optional[str] = None
    query: Optional[ElementQuery] = None

    def is_empty(self) -> bool:
        return (
            self.identifier is None
            and self.label is None
            and self.text is None
            and self.type is None
            and self.query is None
        )


# Screen definitions use the same selector shape.
ElementSpec = ElementTarget
