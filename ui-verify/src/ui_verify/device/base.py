"""Collaborator interface between the verification engine and a device.

The engine never talks to adb (or any other device tooling) directly; it only
uses a `DeviceBackend`. Backends raise `UiVerifyError` subclasses for
conditions that make a check impossible to evaluate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ui_verify.elements import UIElement, count_elements


@dataclass(frozen=True)
class DeviceInfo:
    id: str
    name: str = ""
    state: str = ""
    os_version: str = ""

    def is_ready(self) -> bool:
        return self.state.strip().lower() in {"device", "booted", "ready"}


@dataclass(frozen=True)
class SnapshotStats:
    total_elements: int


@dataclass(frozen=True)
class UiSnapshot:
    tree: UIElement
    stats: SnapshotStats = field(default_factory=lambda: SnapshotStats(total_elements=0))

    @classmethod
    def of(cls, tree: UIElement) -> "UiSnapshot":
        return cls(tree=tree, stats=SnapshotStats(total_elements=count_elements(tree)))


@dataclass(frozen=True)
class ScreenshotInfo:
    path: Path
    size: int = 0


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    process: str
    level: str
    message: str
    pid: Optional[int] = None


class DeviceBackend:
    """Async device collaborator. Subclasses implement every method."""

    async def list_running_devices(self) -> List[DeviceInfo]:
        raise NotImplementedError

    async def get_device(self, device_id: str) -> DeviceInfo:
        """Return device info; raise `DeviceNotFoundError` for unknown ids."""
        raise NotImplementedError

    async def inspect(self, device_id: str, session_id: str) -> UiSnapshot:
        """Capture a fresh UI hierarchy; raise `SnapshotError` on failure."""
        raise NotImplementedError

    async def screenshot(self, device_id: str, output_path: Path) -> ScreenshotInfo:
        raise NotImplementedError

    async def get_system_log(
        self,
        *,
        device_id: str,
        since: datetime,
        process_filter: Optional[str] = None,
        level: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LogEntry]:
        """Return log entries at or after `since`; raise `LogRetrievalError` on failure."""
        raise NotImplementedError
