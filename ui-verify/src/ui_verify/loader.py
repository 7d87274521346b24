"""YAML/JSON document loading and JSON-schema validation.

Screen definitions, step files and config files all go through here so that
every user-authored document is reported the same way when it is malformed.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict

import yaml
from jsonschema import Draft202012Validator

SCHEMAS_DIR = Path(__file__).resolve().parent / "schemas"
MAX_REPORTED_ERRORS = 20

_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.loads,
}


class SchemaValidationError(RuntimeError):
    pass


def load_yaml_or_json(path: Path) -> Dict[str, Any]:
    """Parse a .yaml/.yml/.json file whose top-level value is a mapping."""
    parse = _PARSERS.get(path.suffix.lower())
    if parse is None:
        raise ValueError(f"Expected a .yaml, .yml or .json file, got: {path}")
    if not path.is_file():
        raise FileNotFoundError(path)
    data = parse(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SchemaValidationError(f"{path}: expected a mapping at the top level")
    return data


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    """Load one of the bundled JSON schemas by file name (cached; do not mutate)."""
    schema = json.loads((SCHEMAS_DIR / name).read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    return schema


def validate_against_schema(
    instance: Dict[str, Any],
    schema: Dict[str, Any],
    *,
    where: str,
) -> None:
    errors = sorted(
        Draft202012Validator(schema).iter_errors(instance),
        key=lambda e: [str(p) for p in e.absolute_path],
    )
    if not errors:
        return
    lines = [
        f"- {where}:{'/'.join(str(p) for p in e.absolute_path)}: {e.message}"
        for e in errors[:MAX_REPORTED_ERRORS]
    ]
    if len(errors) > MAX_REPORTED_ERRORS:
        lines.append(f"... ({len(errors) - MAX_REPORTED_ERRORS} more)")
    raise SchemaValidationError("\n".join(lines))
