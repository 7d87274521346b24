"""Android adb controller.

A thin, synchronous wrapper around the `adb` binary. Everything the Android
backend needs from a device goes through `AndroidController._run` so tests can
replace `subprocess.run` in one place.
"""

from __future__ import annotations

import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

DEFAULT_DUMP_PATH = "/sdcard/__ui_verify_dump.xml"
PNG_MAGIC = b"\x89PNG"


class AndroidControllerError(RuntimeError):
    """Raised when an adb operation fails."""


@dataclass(frozen=True)
class AdbResult:
    """One finished adb invocation; stdout is bytes for exec-out calls."""

    args: List[str]
    stdout: Any
    stderr: str
    returncode: int

    def ok(self) -> bool:
        return self.returncode == 0

    def describe(self) -> str:
        return f"`{' '.join(self.args)}` exited {self.returncode}: {self.stderr.strip()[:500]}"


@dataclass(frozen=True)
class AdbDevice:
    serial: str
    state: str
    model: Optional[str] = None


def parse_adb_devices(txt: str) -> List[AdbDevice]:
    """Parse `adb devices -l` output."""
    out: List[AdbDevice] = []
    for line in (ln.strip() for ln in txt.splitlines()):
        if not line or line.startswith(("List of devices", "*")):
            continue
        serial, *fields = line.split()
        if not fields:
            continue
        props = dict(tok.split(":", 1) for tok in fields[1:] if ":" in tok)
        out.append(AdbDevice(serial=serial, state=fields[0], model=props.get("model") or None))
    return out


class AndroidController:
    """Runs adb for UI dumps, screenshots and logcat against one serial."""

    def __init__(
        self,
        *,
        adb_path: str = "adb",
        serial: Optional[str] = None,
        timeout_s: float = 30.0,
    ) -> None:
        self._adb_path = adb_path
        self._serial = serial
        self._timeout_s = timeout_s

    @property
    def serial(self) -> Optional[str]:
        return self._serial

    def for_serial(self, serial: str) -> "AndroidController":
        if serial == self._serial:
            return self
        return AndroidController(adb_path=self._adb_path, serial=serial, timeout_s=self._timeout_s)

    def _run(
        self,
        args: List[str],
        *,
        binary: bool = False,
        scoped: bool = True,
        timeout_s: float | None = None,
        check: bool = True,
    ) -> AdbResult:
        cmd = [self._adb_path]
        if scoped and self._serial:
            cmd.extend(["-s", self._serial])
        cmd.extend(args)
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=not binary,
            timeout=self._timeout_s if timeout_s is None else float(timeout_s),
        )
        stderr = proc.stderr or ""
        if isinstance(stderr, bytes):
            stderr = stderr.decode("utf-8", errors="replace")
        result = AdbResult(args=cmd, stdout=proc.stdout, stderr=stderr, returncode=proc.returncode)
        if check and not result.ok():
            raise AndroidControllerError(result.describe())
        return result

    def adb(self, *args: str, timeout_s: float | None = None, check: bool = True) -> AdbResult:
        return self._run(list(args), timeout_s=timeout_s, check=check)

    def adb_shell(
        self,
        command: str,
        *,
        timeout_s: float | None = None,
        timeout_ms: int | None = None,
        check: bool = True,
    ) -> AdbResult:
        if timeout_ms is not None:
            timeout_s = timeout_ms / 1000.0
        return self._run(["shell", command], timeout_s=timeout_s, check=check)

    def devices(self) -> List[AdbDevice]:
        # Device listing must not be scoped to a serial.
        return parse_adb_devices(self._run(["devices", "-l"], scoped=False).stdout)

    def getprop(self, name: str) -> str:
        return self.adb_shell(f"getprop {shlex.quote(name)}", check=False).stdout.strip()

    def pidof(self, package: str) -> List[int]:
        out = self.adb_shell(f"pidof {shlex.quote(package)}", check=False).stdout
        return [int(tok) for tok in out.split() if tok.isdigit()]

    def screencap(self, *, timeout_s: float | None = None) -> bytes:
        """Return a screenshot PNG via `adb exec-out screencap -p`."""
        res = self._run(["exec-out", "screencap", "-p"], binary=True, timeout_s=timeout_s)
        if not res.stdout.startswith(PNG_MAGIC):
            raise AndroidControllerError("screencap returned non-PNG bytes")
        return res.stdout

    def screencap_to_file(self, path: Path, *, timeout_s: float | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.screencap(timeout_s=timeout_s))
        return path

    def _dump_once(self, remote: str, local_path: Path, timeout_s: float | None) -> bool:
        dumped = self.adb_shell(
            f"uiautomator dump {shlex.quote(remote)}", timeout_s=timeout_s, check=False
        )
        if not dumped.ok():
            return False
        pulled = self._run(["pull", remote, str(local_path)], timeout_s=timeout_s, check=False)
        return pulled.ok() and local_path.is_file() and local_path.stat().st_size > 0

    def uiautomator_dump(
        self,
        *,
        local_path: Path,
        remote_path: str = DEFAULT_DUMP_PATH,
        timeout_s: float | None = None,
        max_attempts: int = 3,
        retry_delay_s: float = 0.5,
    ) -> Path:
        """Dump the window hierarchy on the device and pull it to `local_path`.

        uiautomator occasionally fails while the UI is animating, so the dump
        is retried up to `max_attempts` times. The remote file is removed
        after a successful pull.
        """
        local_path.parent.mkdir(parents=True, exist_ok=True)
        attempt = 0
        while not self._dump_once(remote_path, local_path, timeout_s):
            attempt += 1
            if attempt >= max_attempts:
                raise AndroidControllerError(
                    f"no UI dump at {remote_path} after {attempt} retries"
                )
            time.sleep(retry_delay_s)
        self.adb_shell(f"rm -f {shlex.quote(remote_path)}", check=False)
        return local_path

    def logcat(
        self,
        *,
        since: Optional[str] = None,
        pid: Optional[int] = None,
        min_priority: Optional[str] = None,
        max_lines: Optional[int] = None,
        timeout_s: float | None = None,
    ) -> str:
        """Dump (non-blocking) logcat in `threadtime` format with epoch stamps.

        `since` is an epoch `-T` value ('sssss.mmm'), see `format_since`;
        `min_priority` is a single letter (V/D/I/W/E/F).
        """
        args: List[str] = ["logcat", "-d", "-v", "threadtime", "-v", "epoch"]
        if since:
            args += ["-T", since]
        elif max_lines:
            args += ["-t", str(int(max_lines))]
        if pid is not None:
            args.append(f"--pid={int(pid)}")
        if min_priority:
            args.append(f"*:{min_priority}")
        return self.adb(*args, timeout_s=timeout_s).stdout
