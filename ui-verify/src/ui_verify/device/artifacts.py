from __future__ import annotations

import logging
import re
from pathlib import Path

from ui_verify.errors import ArtifactError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_component(name: str) -> str:
    cleaned = _UNSAFE_CHARS_RE.sub("_", str(name)).strip("._")
    return cleaned or "_"


class ArtifactStore:
    """Per-session artifact directories: `<root>/<session>/assertions/<assertion_id>/`."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def get_snapshot_directory(self, session_id: str, assertion_id: str) -> Path:
        """Create (idempotently) and return the directory for one assertion."""
        path = self._root / _safe_component(session_id) / "assertions" / _safe_component(
            assertion_id
        )
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArtifactError(f"Failed to create artifact directory {path}: {e}") from e
        logger.debug("artifact directory ready: %s", path)
        return path
