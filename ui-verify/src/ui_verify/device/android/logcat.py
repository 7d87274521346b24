"""logcat output parsing.

The backend reads logcat with `-v threadtime -v epoch`, which stamps every
line with seconds since the epoch instead of the device's local wall clock.
The `-T` window is given in the same form, so neither side depends on the
device timezone. Plain `threadtime` lines (no epoch) are still accepted and
read as UTC.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import List, Optional

from ui_verify.device.base import LogEntry

_BODY = (
    r"(?P<pid>\d+)\s+(?P<tid>\d+)\s+"
    r"(?P<prio>[VDIWEFA])\s+"
    r"(?P<tag>.*?)\s*:\s(?P<msg>.*)$"
)

# 1768478401.120  1234  1250 I ActivityManager: message
_EPOCH_RE = re.compile(r"^\s*(?P<sec>\d+)\.(?P<ms>\d{3})\s+" + _BODY)

# 01-15 12:34:56.789  1234  5678 E Tag: message
_THREADTIME_RE = re.compile(
    r"^(?P<month>\d{2})-(?P<day>\d{2})\s+"
    r"(?P<time>\d{2}:\d{2}:\d{2})\.(?P<ms>\d{3})\s+" + _BODY
)

PRIORITY_TO_LEVEL = {
    "V": "verbose",
    "D": "debug",
    "I": "info",
    "W": "warning",
    "E": "error",
    "F": "fault",
    "A": "fault",
}

LEVEL_TO_PRIORITY = {
    "verbose": "V",
    "debug": "D",
    "info": "I",
    "default": "I",
    "warning": "W",
    "error": "E",
    "fault": "F",
}


def format_since(ts: datetime) -> str:
    """logcat `-T` value as epoch seconds with milliseconds ('sssss.mmm')."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ms = int(ts.timestamp() * 1000)
    return f"{ms // 1000}.{ms % 1000:03d}"


def _timestamp(m: "re.Match[str]", year: int) -> datetime:
    ms = int(m.group("ms"))
    if "sec" in m.groupdict():
        return datetime.fromtimestamp(int(m.group("sec")), tz=timezone.utc).replace(
            microsecond=ms * 1000
        )
    return datetime.strptime(
        f"{year}-{m.group('month')}-{m.group('day')} {m.group('time')}",
        "%Y-%m-%d %H:%M:%S",
    ).replace(microsecond=ms * 1000, tzinfo=timezone.utc)


def parse_threadtime(
    txt: str, *, year: Optional[int] = None, since: Optional[datetime] = None
) -> List[LogEntry]:
    """Parse `logcat -v threadtime [-v epoch]` output; continuation lines are skipped.

    `year` only applies to plain threadtime lines, which carry no year.
    """
    yr = year if year is not None else datetime.now(timezone.utc).year
    out: List[LogEntry] = []
    for raw_line in txt.splitlines():
        line = raw_line.rstrip()
        m = _EPOCH_RE.match(line) or _THREADTIME_RE.match(line)
        if not m:
            continue
        ts = _timestamp(m, yr)
        if since is not None and ts < since:
            continue
        out.append(
            LogEntry(
                timestamp=ts,
                process=m.group("tag").strip(),
                level=PRIORITY_TO_LEVEL.get(m.group("prio"), "info"),
                message=m.group("msg"),
                pid=int(m.group("pid")),
            )
        )
    return out
