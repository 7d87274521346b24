from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from ui_verify.device.base import (
    DeviceBackend,
    DeviceInfo,
    LogEntry,
    ScreenshotInfo,
    UiSnapshot,
)
from ui_verify.elements import Frame, UIElement
from ui_verify.errors import DeviceNotFoundError

DEFAULT_DEVICE = DeviceInfo(id="emulator-5554", name="Pixel_7", state="device", os_version="14")


def el(
    type: str = "Button",
    *,
    identifier: Optional[str] = None,
    label: Optional[str] = None,
    value: Optional[str] = None,
    enabled: bool = True,
    visible: bool = True,
    selected: bool = False,
    frame: Frame = Frame(0, 0, 100, 40),
    children: Sequence[UIElement] = (),
    traits: Sequence[str] = (),
) -> UIElement:
    return UIElement(
        type=type,
        identifier=identifier,
        label=label,
        value=value,
        frame=frame,
        enabled=enabled,
        visible=visible,
        selected=selected,
        traits=tuple(traits),
        children=tuple(children),
    )


def app(*children: UIElement) -> UIElement:
    return UIElement(type="Application", frame=Frame(0, 0, 1080, 2400), children=tuple(children))


def log(message: str, *, process: str = "com.example.app", level: str = "error") -> LogEntry:
    return LogEntry(
        timestamp=datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc),
        process=process,
        level=level,
        message=message,
    )


TreeOrError = Union[UIElement, Exception]


class FakeBackend(DeviceBackend):
    """In-memory backend.

    `trees` is consumed one per `inspect` call; the last entry repeats. An
    Exception entry is raised instead of returned.
    """

    def __init__(
        self,
        *,
        trees: Sequence[TreeOrError] = (),
        logs: Sequence[Union[Sequence[LogEntry], Exception]] = (),
        devices: Sequence[DeviceInfo] = (DEFAULT_DEVICE,),
        screenshot_error: Optional[Exception] = None,
    ) -> None:
        self._trees = list(trees)
        self._logs = list(logs)
        self.devices = list(devices)
        self.screenshot_error = screenshot_error
        self.inspect_calls = 0
        self.log_calls: List[Dict[str, Any]] = []
        self.screenshots: List[Path] = []

    async def list_running_devices(self) -> List[DeviceInfo]:
        return list(self.devices)

    async def get_device(self, device_id: str) -> DeviceInfo:
        for d in self.devices:
            if d.id == device_id:
                return d
        raise DeviceNotFoundError(f"Device not found: {device_id}")

    async def inspect(self, device_id: str, session_id: str) -> UiSnapshot:
        idx = min(self.inspect_calls, len(self._trees) - 1)
        self.inspect_calls += 1
        item = self._trees[idx]
        if isinstance(item, Exception):
            raise item
        return UiSnapshot.of(item)

    async def screenshot(self, device_id: str, output_path: Path) -> ScreenshotInfo:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"\x89PNG fake")
        self.screenshots.append(output_path)
        return ScreenshotInfo(path=output_path, size=output_path.stat().st_size)

    async def get_system_log(
        self,
        *,
        device_id: str,
        since: datetime,
        process_filter: Optional[str] = None,
        level: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LogEntry]:
        idx = min(len(self.log_calls), len(self._logs) - 1)
        self.log_calls.append(
            {
                "device_id": device_id,
                "since": since,
                "process_filter": process_filter,
                "level": level,
                "limit": limit,
            }
        )
        item = self._logs[idx] if self._logs else []
        if isinstance(item, Exception):
            raise item
        return list(item)
