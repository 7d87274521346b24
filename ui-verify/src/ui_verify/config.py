"""Runtime configuration.

Precedence (lowest to highest): built-in defaults, `UI_VERIFY_*` environment
variables, an optional YAML/JSON config file, explicit overrides (CLI flags).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from ui_verify.loader import load_schema, load_yaml_or_json, validate_against_schema

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_POLL_INTERVAL_MS = 500
DEFAULT_ARTIFACTS_DIR = Path(".ui-verify") / "artifacts"


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _env_str(name: str) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


@dataclass(frozen=True)
class VerifyConfig:
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    artifacts_dir: Path = DEFAULT_ARTIFACTS_DIR
    adb_path: str = "adb"
    serial: Optional[str] = None

    def with_overrides(self, overrides: Mapping[str, Any]) -> "VerifyConfig":
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        changes = {k: v for k, v in overrides.items() if k in known and v is not None}
        if "artifacts_dir" in changes:
            changes["artifacts_dir"] = Path(changes["artifacts_dir"])
        for key in ("timeout_ms", "poll_interval_ms"):
            if key in changes:
                changes[key] = int(changes[key])
        return replace(self, **changes)


def config_from_env() -> VerifyConfig:
    return VerifyConfig().with_overrides(
        {
            "timeout_ms": _env_int("UI_VERIFY_TIMEOUT_MS"),
            "poll_interval_ms": _env_int("UI_VERIFY_POLL_INTERVAL_MS"),
            "artifacts_dir": _env_str("UI_VERIFY_ARTIFACTS_DIR"),
            "adb_path": _env_str("UI_VERIFY_ADB_PATH"),
            "serial": _env_str("UI_VERIFY_SERIAL"),
        }
    )


def load_config(path: Optional[Path] = None, **overrides: Any) -> VerifyConfig:
    cfg = config_from_env()
    if path is not None:
        data = load_yaml_or_json(path)
        validate_against_schema(data, load_schema("config.schema.json"), where=str(path))
        cfg = cfg.with_overrides(data)
    return cfg.with_overrides(overrides)
