from __future__ import annotations

import pytest

from ui_verify.device.android.hierarchy import (
    HierarchyParseError,
    parse_uiautomator_xml,
    short_class_name,
)
from ui_verify.elements import Frame, count_elements, iter_elements

DUMP = """<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>
<hierarchy rotation="0">
  <node index="0" text="" resource-id="" class="android.widget.FrameLayout" package="com.example.app"
        content-desc="" checkable="false" checked="false" clickable="false" enabled="true"
        focusable="false" focused="false" scrollable="false" long-clickable="false" password="false"
        selected="false" bounds="[0,0][1080,2400]">
    <node index="0" text="Sign in" resource-id="com.example.app:id/login_button"
          class="android.widget.Button" package="com.example.app" content-desc=""
          checkable="false" checked="false" clickable="true" enabled="false" focusable="true"
          focused="false" scrollable="false" password="false" selected="false"
          bounds="[40,1800][1040,1940]" />
    <node index="1" text="" resource-id="com.example.app:id/remember" class="android.widget.CheckBox"
          package="com.example.app" content-desc="Remember me" checkable="true" checked="true"
          clickable="true" enabled="true" focusable="true" focused="false" scrollable="false"
          password="false" selected="false" bounds="[40,1600][400,1700]" />
    <node index="2" text="hunter2" resource-id="com.example.app:id/password"
          class="android.widget.EditText" package="com.example.app" content-desc=""
          password="true" enabled="true" bounds="[40,1400][1040,1500]" />
    <node index="3" text="" resource-id="com.example.app:id/spacer" class="android.view.View"
          package="com.example.app" content-desc="" enabled="true" bounds="[0,0][0,0]" />
  </node>
</hierarchy>
"""


def _by_id(root, suffix):
    for e in iter_elements(root):
        if e.identifier and e.identifier.endswith(suffix):
            return e
    raise AssertionError(f"missing {suffix}")


def test_parse_uiautomator_xml_maps_attributes() -> None:
    root = parse_uiautomator_xml(DUMP)

    assert root.type == "Application"
    assert root.frame == Frame(0, 0, 1080, 2400)
    assert count_elements(root) == 6

    button = _by_id(root, "login_button")
    assert button.type == "Button"
    assert button.identifier == "com.example.app:id/login_button"
    assert button.label == "Sign in"
    assert button.value == "Sign in"
    assert button.enabled is False
    assert button.visible is True
    assert button.frame == Frame(40, 1800, 1000, 140)
    assert "clickable" in button.traits


def test_content_desc_wins_for_label_and_checked_counts_as_selected() -> None:
    root = parse_uiautomator_xml(DUMP)
    checkbox = _by_id(root, "remember")
    assert checkbox.label == "Remember me"
    assert checkbox.value is None
    assert checkbox.selected is True
    assert {"checkable", "checked"} <= set(checkbox.traits)


def test_password_field_is_marked_secure() -> None:
    field = _by_id(parse_uiautomator_xml(DUMP), "password")
    assert "secure" in field.traits


def test_zero_area_node_is_not_visible() -> None:
    spacer = _by_id(parse_uiautomator_xml(DUMP), "spacer")
    assert spacer.visible is False


def test_visible_to_user_attribute_overrides_bounds() -> None:
    xml = (
        '<hierarchy><node class="android.widget.TextView" text="Hidden" '
        'visible-to-user="false" bounds="[0,0][100,100]" /></hierarchy>'
    )
    (node,) = parse_uiautomator_xml(xml).children
    assert node.visible is False


def test_parse_rejects_garbage() -> None:
    with pytest.raises(HierarchyParseError):
        parse_uiautomator_xml("ERROR: could not get idle state.")
    with pytest.raises(HierarchyParseError):
        parse_uiautomator_xml("<root/>")


def test_short_class_name() -> None:
    assert short_class_name("android.widget.Button") == "Button"
    assert short_class_name(None) == "View"
