"""`DeviceBackend` over adb.

Blocking adb calls run in a worker thread (`asyncio.to_thread`) so polling
stays cooperative. adb failures are mapped onto the engine's error types.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ui_verify.device.android.controller import AndroidController, AndroidControllerError
from ui_verify.device.android.hierarchy import HierarchyParseError, parse_uiautomator_xml
from ui_verify.device.android.logcat import LEVEL_TO_PRIORITY, format_since, parse_threadtime
from ui_verify.device.base import DeviceBackend, DeviceInfo, LogEntry, ScreenshotInfo, UiSnapshot
from ui_verify.errors import (
    DeviceNotFoundError,
    LogRetrievalError,
    SnapshotError,
    UiVerifyError,
)

logger = logging.getLogger(__name__)


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class AndroidBackend(DeviceBackend):
    def __init__(self, controller: Optional[AndroidController] = None) -> None:
        self._controller = controller or AndroidController()

    def _for(self, device_id: str) -> AndroidController:
        return self._controller.for_serial(device_id)

    def _list_devices(self) -> List[DeviceInfo]:
        try:
            devices = self._controller.devices()
        except (AndroidControllerError, OSError, subprocess.TimeoutExpired) as e:
            raise UiVerifyError(f"Failed to list devices: {e}") from e
        return [
            DeviceInfo(id=d.serial, name=d.model or d.serial, state=d.state)
            for d in devices
        ]

    async def list_running_devices(self) -> List[DeviceInfo]:
        devices = await asyncio.to_thread(self._list_devices)
        return [d for d in devices if d.is_ready()]

    async def get_device(self, device_id: str) -> DeviceInfo:
        devices = await asyncio.to_thread(self._list_devices)
        for d in devices:
            if d.id == device_id:
                if not d.is_ready():
                    return d
                os_version = await asyncio.to_thread(
                    self._for(device_id).getprop, "ro.build.version.release"
                )
                return DeviceInfo(id=d.id, name=d.name, state=d.state, os_version=os_version)
        raise DeviceNotFoundError(f"Device not found: {device_id}")

    def _inspect(self, device_id: str) -> UiSnapshot:
        with tempfile.TemporaryDirectory(prefix="ui_verify_dump_") as tmp:
            local = Path(tmp) / "window_dump.xml"
            try:
                self._for(device_id).uiautomator_dump(local_path=local)
                tree = parse_uiautomator_xml(local.read_bytes())
            except (
                AndroidControllerError,
                HierarchyParseError,
                OSError,
                subprocess.TimeoutExpired,
            ) as e:
                raise SnapshotError(f"Failed to capture UI hierarchy on {device_id}: {e}") from e
        return UiSnapshot.of(tree)

    async def inspect(self, device_id: str, session_id: str) -> UiSnapshot:
        logger.debug("inspect %s (session=%s)", device_id, session_id)
        return await asyncio.to_thread(self._inspect, device_id)

    async def screenshot(self, device_id: str, output_path: Path) -> ScreenshotInfo:
        path = await asyncio.to_thread(self._for(device_id).screencap_to_file, Path(output_path))
        return ScreenshotInfo(path=path, size=path.stat().st_size)

    def _system_log(
        self,
        device_id: str,
        since: datetime,
        process_filter: Optional[str],
        level: Optional[str],
        limit: Optional[int],
    ) -> List[LogEntry]:
        ctr = self._for(device_id)
        pid: Optional[int] = None
        priority = LEVEL_TO_PRIORITY.get(level.lower()) if level else None
        try:
            if process_filter:
                pids = ctr.pidof(process_filter)
                if pids:
                    pid = pids[0]
            txt = ctr.logcat(since=format_since(since), pid=pid, min_priority=priority)
        except (AndroidControllerError, OSError, subprocess.TimeoutExpired) as e:
            raise LogRetrievalError(f"Failed to read logcat on {device_id}: {e}") from e
        entries = parse_threadtime(txt, since=since)
        if process_filter and pid is None:
            # App not running: fall back to matching the package name in tag/message.
            entries = [
                e for e in entries if process_filter in e.process or process_filter in e.message
            ]
        if limit is not None and len(entries) > limit:
            entries = entries[-limit:]
        return entries

    async def get_system_log(
        self,
        *,
        device_id: str,
        since: datetime,
        process_filter: Optional[str] = None,
        level: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LogEntry]:
        return await asyncio.to_thread(
            self._system_log, device_id, _as_utc(since), process_filter, level, limit
        )
