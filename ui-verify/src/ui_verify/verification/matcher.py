"""Element matching over a UI snapshot.

Target categories are tried in a fixed priority order: identifier, label,
text, type, query. The first category that is present AND matches wins; a
present category without a match falls through to the next present one.

Shorthand categories (identifier/label/text/type) see every node regardless
of its visible/enabled flags, so "found but not visible" can be told apart
from "not found". Only `ElementQuery` applies its own state filters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from ui_verify.elements import ElementQuery, ElementTarget, UIElement, iter_elements

MATCHED_BY_IDENTIFIER = "identifier"
MATCHED_BY_LABEL = "label"
MATCHED_BY_TEXT = "text"
MATCHED_BY_TYPE = "type"
MATCHED_BY_QUERY = "query"


@dataclass(frozen=True)
class MatchResult:
    element: Optional[UIElement]
    matched_by: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.element is not None


def _first(root: UIElement, pred: Callable[[UIElement], bool]) -> Optional[UIElement]:
    for node in iter_elements(root):
        if pred(node):
            return node
    return None


def element_contains_text(element: UIElement, text: str) -> bool:
    needle = text.lower()
    for hay in (element.label, element.value, element.identifier):
        if hay and needle in hay.lower():
            return True
    return False


def find_by_identifier(root: UIElement, identifier: str) -> Optional[UIElement]:
    return _first(root, lambda e: e.identifier == identifier)


def find_by_label(root: UIElement, label: str) -> Optional[UIElement]:
    return _first(root, lambda e: e.label == label)


def find_by_text(root: UIElement, text: str) -> List[UIElement]:
    """All nodes whose label, value or identifier contains `text` (case-insensitive)."""
    return [e for e in iter_elements(root) if element_contains_text(e, text)]


def find_by_type(root: UIElement, type_name: str) -> Optional[UIElement]:
    return _first(root, lambda e: e.type == type_name)


def find_elements(root: UIElement, query: ElementQuery) -> List[UIElement]:
    return [e for e in iter_elements(root) if query.matches(e)]


def find_element(root: UIElement, query: ElementQuery) -> Optional[UIElement]:
    return _first(root, query.matches)


def find_target(root: UIElement, target: ElementTarget) -> MatchResult:
    if target.identifier is not None:
        el = find_by_identifier(root, target.identifier)
        if el is not None:
            return MatchResult(el, MATCHED_BY_IDENTIFIER)

    if target.label is not None:
        el = find_by_label(root, target.label)
        if el is not None:
            return MatchResult(el, MATCHED_BY_LABEL)

    if target.text is not None:
        candidates = find_by_text(root, target.text)
        if candidates:
            return MatchResult(candidates[0], MATCHED_BY_TEXT)

    if target.type is not None:
        el = find_by_type(root, target.type)
        if el is not None:
            return MatchResult(el, MATCHED_BY_TYPE)

    if target.query is not None:
        el = find_element(root, target.query)
        if el is not None:
            return MatchResult(el, MATCHED_BY_QUERY)

    return MatchResult(None)


def describe_target(target: ElementTarget) -> str:
    parts: List[str] = []
    if target.identifier is not None:
        parts.append(f'identifier="{target.identifier}"')
    if target.label is not None:
        parts.append(f'label="{target.label}"')
    if target.text is not None:
        parts.append(f'text="{target.text}"')
    if target.type is not None:
        parts.append(f"type={target.type}")
    if target.query is not None:
        parts.append("custom query")
    return ", ".join(parts) if parts else "unknown element"


def describe_spec(spec: ElementTarget) -> str:
    """Compact form used in screen summaries: `#id`, `label="..."`, ..."""
    if spec.identifier is not None:
        return f"#{spec.identifier}"
    if spec.label is not None:
        return f'label="{spec.label}"'
    if spec.text is not None:
        return f'text="{spec.text}"'
    if spec.type is not None:
        return f"type={spec.type}"
    if spec.query is not None:
        return "custom query"
    return "unknown element"


def is_hittable(element: UIElement) -> bool:
    return element.visible and element.enabled and element.frame.area > 0
