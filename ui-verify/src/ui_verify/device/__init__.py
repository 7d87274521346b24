from ui_verify.device.artifacts import ArtifactStore
from ui_verify.device.base import (
    DeviceBackend,
    DeviceInfo,
    LogEntry,
    ScreenshotInfo,
    SnapshotStats,
    UiSnapshot,
)

__all__ = [
    "ArtifactStore",
    "DeviceBackend",
    "DeviceInfo",
    "LogEntry",
    "ScreenshotInfo",
    "SnapshotStats",
    "UiSnapshot",
]
