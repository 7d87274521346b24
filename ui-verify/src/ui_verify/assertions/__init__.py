from ui_verify.assertions.base import VerifyContext, resolve_device
from ui_verify.assertions.crash import assert_no_crash
from ui_verify.assertions.enabled import (
    assert_disabled,
    assert_disabled_by_id,
    assert_disabled_by_label,
    assert_disabled_by_text,
    assert_enabled,
    assert_enabled_by_id,
    assert_enabled_by_label,
    assert_enabled_by_text,
)
from ui_verify.assertions.hittable import (
    assert_hittable,
    assert_hittable_by_id,
    assert_not_hittable,
    assert_not_hittable_by_id,
)
from ui_verify.assertions.logs import assert_log_contains, assert_log_not_contains
from ui_verify.assertions.no_errors import (
    assert_no_errors,
    assert_no_errors_for_app,
    assert_no_http_errors,
    count_errors,
    has_error_pattern,
)
from ui_verify.assertions.screen import (
    ScreenDefinition,
    assert_screen,
    assert_screen_by_name,
    create_screen_definition,
    load_screens,
    parse_screen_definition,
)
from ui_verify.assertions.selected import (
    assert_not_selected,
    assert_not_selected_by_id,
    assert_not_selected_by_label,
    assert_not_selected_by_text,
    assert_selected,
    assert_selected_by_id,
    assert_selected_by_label,
    assert_selected_by_text,
)
from ui_verify.assertions.text import (
    assert_text,
    assert_text_by_id,
    assert_text_by_label,
    assert_text_contains,
    assert_text_matches,
)
from ui_verify.assertions.value import (
    assert_value,
    assert_value_by_id,
    assert_value_empty,
    assert_value_not_empty,
)
from ui_verify.assertions.visible import (
    assert_not_visible,
    assert_not_visible_by_id,
    assert_not_visible_by_label,
    assert_not_visible_by_text,
    assert_visible,
    assert_visible_by_id,
    assert_visible_by_label,
    assert_visible_by_text,
    wait_for,
    wait_for_not,
)

__all__ = [
    "ScreenDefinition",
    "VerifyContext",
    "assert_disabled",
    "assert_disabled_by_id",
    "assert_disabled_by_label",
    "assert_disabled_by_text",
    "assert_enabled",
    "assert_enabled_by_id",
    "assert_enabled_by_label",
    "assert_enabled_by_text",
    "assert_hittable",
    "assert_hittable_by_id",
    "assert_log_contains",
    "assert_log_not_contains",
    "assert_no_crash",
    "assert_no_errors",
    "assert_no_errors_for_app",
    "assert_no_http_errors",
    "assert_not_hittable",
    "assert_not_hittable_by_id",
    "assert_not_selected",
    "assert_not_selected_by_id",
    "assert_not_selected_by_label",
    "assert_not_selected_by_text",
    "assert_not_visible",
    "assert_not_visible_by_id",
    "assert_not_visible_by_label",
    "assert_not_visible_by_text",
    "assert_screen",
    "assert_screen_by_name",
    "assert_selected",
    "assert_selected_by_id",
    "assert_selected_by_label",
    "assert_selected_by_text",
    "assert_text",
    "assert_text_by_id",
    "assert_text_by_label",
    "assert_text_contains",
    "assert_text_matches",
    "assert_value",
    "assert_value_by_id",
    "assert_value_empty",
    "assert_value_not_empty",
    "assert_visible",
    "assert_visible_by_id",
    "assert_visible_by_label",
    "assert_visible_by_text",
    "count_errors",
    "create_screen_definition",
    "has_error_pattern",
    "load_screens",
    "parse_screen_definition",
    "resolve_device",
    "wait_for",
    "wait_for_not",
]
