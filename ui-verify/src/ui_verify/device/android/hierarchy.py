"""UIAutomator XML to `UIElement` tree conversion."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Any, List, Optional, Tuple

from ui_verify.elements import Frame, UIElement, clean_text, parse_bool

_UIAUTOMATOR_BOUNDS_RE = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")


class HierarchyParseError(ValueError):
    pass


def _parse_uiautomator_bounds(bounds: Any) -> Optional[Tuple[int, int, int, int]]:
    if not isinstance(bounds, str):
        return None
    m = _UIAUTOMATOR_BOUNDS_RE.search(bounds)
    if not m:
        return None
    x1, y1, x2, y2 = (int(m.group(i)) for i in range(1, 5))
    if x2 < x1 or y2 < y1:
        return None
    return x1, y1, x2, y2


def short_class_name(cls: Optional[str]) -> str:
    """`android.widget.Button` -> `Button`."""
    if not cls:
        return "View"
    return cls.rsplit(".", 1)[-1] or "View"


def _traits(attrs: dict) -> Tuple[str, ...]:
    out: List[str] = []
    for attr in ("clickable", "checkable", "checked", "focusable", "focused", "scrollable"):
        if parse_bool(attrs.get(attr)):
            out.append(attr)
    if parse_bool(attrs.get("password")):
        out.append("secure")
    return tuple(out)


def _node_to_element(node: ET.Element) -> UIElement:
    attrs = node.attrib
    bbox = _parse_uiautomator_bounds(attrs.get("bounds"))
    frame = Frame.from_bounds(*bbox) if bbox is not None else Frame()

    text = clean_text(attrs.get("text"))
    desc = clean_text(attrs.get("content-desc"))
    hint = clean_text(attrs.get("hint"))

    visible = parse_bool(attrs.get("visible-to-user"))
    if visible is None:
        visible = frame.area > 0
    enabled = parse_bool(attrs.get("enabled"))
    selected = bool(parse_bool(attrs.get("selected")) or parse_bool(attrs.get("checked")))

    children = tuple(_node_to_element(child) for child in node if child.tag == "node")
    return UIElement(
        type=short_class_name(attrs.get("class")),
        identifier=clean_text(attrs.get("resource-id")),
        label=desc or text,
        value=text,
        frame=frame,
        enabled=True if enabled is None else enabled,
        visible=visible,
        selected=selected,
        traits=_traits(attrs),
        children=children,
        hint=hint,
    )


def parse_uiautomator_xml(xml_text: str | bytes) -> UIElement:
    """Build a tree rooted at a synthetic `Application` element.

    Raises `HierarchyParseError` when the dump is not a UIAutomator hierarchy.
    """
    if isinstance(xml_text, (bytes, bytearray)):
        xml_text = xml_text.decode("utf-8", errors="replace")
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise HierarchyParseError(f"invalid uiautomator xml: {e}") from e
    if root.tag != "hierarchy":
        raise HierarchyParseError(f"unexpected root tag: {root.tag}")

    children = tuple(_node_to_element(child) for child in root if child.tag == "node")
    if children:
        width = max(c.frame.x + c.frame.width for c in children)
        height = max(c.frame.y + c.frame.height for c in children)
    else:
        width = height = 0.0
    return UIElement(
        type="Application",
        frame=Frame(width=width, height=height),
        children=children,
    )
