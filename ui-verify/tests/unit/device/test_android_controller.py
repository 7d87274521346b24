from __future__ import annotations

import subprocess
import time
from pathlib import Path
from types import SimpleNamespace

import pytest

from ui_verify.device.android.controller import (
    AdbDevice,
    AndroidController,
    AndroidControllerError,
    parse_adb_devices,
)


def test_android_controller_adb_shell_accepts_timeout_ms(monkeypatch) -> None:
    calls: list[dict] = []

    def fake_run(cmd, **kwargs):
        calls.append({"cmd": cmd, "kwargs": kwargs})
        return SimpleNamespace(stdout="", stderr="", returncode=0)

    monkeypatch.setattr(subprocess, "run", fake_run)

    ctr = AndroidController(adb_path="adb", serial="emulator-5554", timeout_s=123.0)
    ctr.adb_shell("echo ok", timeout_ms=1500, check=False)

    assert calls[0]["cmd"] == ["adb", "-s", "emulator-5554", "shell", "echo ok"]
    assert calls[0]["kwargs"]["timeout"] == 1.5


def test_android_controller_adb_raises_on_nonzero_when_checked(monkeypatch) -> None:
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda cmd, **kwargs: SimpleNamespace(stdout="", stderr="device offline", returncode=1),
    )

    ctr = AndroidController(serial="s")
    with pytest.raises(AndroidControllerError, match="device offline"):
        ctr.adb("shell", "true")
    assert ctr.adb("shell", "true", check=False).returncode == 1


def test_parse_adb_devices() -> None:
    txt = (
        "* daemon started successfully\n"
        "List of devices attached\n"
        "emulator-5554          device product:sdk_gphone64 model:Pixel_7 device:emu64a\n"
        "R58M123ABC             unauthorized usb:1-1 transport_id:3\n"
        "\n"
    )
    assert parse_adb_devices(txt) == [
        AdbDevice(serial="emulator-5554", state="device", model="Pixel_7"),
        AdbDevice(serial="R58M123ABC", state="unauthorized", model=None),
    ]


def test_devices_is_not_scoped_to_serial(monkeypatch) -> None:
    calls: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return SimpleNamespace(
            stdout="List of devices attached\nemulator-5554 device\n", stderr="", returncode=0
        )

    monkeypatch.setattr(subprocess, "run", fake_run)

    devices = AndroidController(adb_path="/opt/adb", serial="emulator-5554").devices()
    assert calls == [["/opt/adb", "devices", "-l"]]
    assert devices == [AdbDevice(serial="emulator-5554", state="device")]


def test_pidof_parses_multiple_pids(monkeypatch) -> None:
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda cmd, **kwargs: SimpleNamespace(stdout="4242 4243\n", stderr="", returncode=0),
    )
    assert AndroidController(serial="s").pidof("com.example.app") == [4242, 4243]


def test_logcat_builds_epoch_threadtime_dump_command(monkeypatch) -> None:
    calls: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return SimpleNamespace(stdout="", stderr="", returncode=0)

    monkeypatch.setattr(subprocess, "run", fake_run)

    ctr = AndroidController(serial="s")
    ctr.logcat(since="1768478400.000", pid=4242, min_priority="E")
    ctr.logcat(max_lines=200)

    assert calls[0] == [
        "adb", "-s", "s", "logcat", "-d", "-v", "threadtime", "-v", "epoch",
        "-T", "1768478400.000", "--pid=4242", "*:E",
    ]
    assert calls[1] == [
        "adb", "-s", "s", "logcat", "-d", "-v", "threadtime", "-v", "epoch", "-t", "200",
    ]


def test_screencap_rejects_non_png(monkeypatch) -> None:
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda cmd, **kwargs: SimpleNamespace(stdout=b"not a png", stderr=b"", returncode=0),
    )
    with pytest.raises(AndroidControllerError, match="non-PNG"):
        AndroidController(serial="s").screencap()


def test_screencap_to_file_writes_png(monkeypatch, tmp_path: Path) -> None:
    png = b"\x89PNG\r\n\x1a\nrest"
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda cmd, **kwargs: SimpleNamespace(stdout=png, stderr=b"", returncode=0),
    )
    out = AndroidController(serial="s").screencap_to_file(tmp_path / "shots" / "a.png")
    assert out.read_bytes() == png


def test_uiautomator_dump_pulls_and_cleans_up(monkeypatch, tmp_path: Path) -> None:
    calls: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        if cmd[3] == "pull":
            Path(cmd[-1]).write_text("<hierarchy/>", encoding="utf-8")
        return SimpleNamespace(stdout="", stderr="", returncode=0)

    monkeypatch.setattr(subprocess, "run", fake_run)

    local = tmp_path / "dump" / "window.xml"
    AndroidController(serial="s").uiautomator_dump(local_path=local)

    assert local.read_text(encoding="utf-8") == "<hierarchy/>"
    assert calls[0][3:] == ["shell", "uiautomator dump /sdcard/__ui_verify_dump.xml"]
    assert calls[1][3:] == ["pull", "/sdcard/__ui_verify_dump.xml", str(local)]
    assert calls[2][3:] == ["shell", "rm -f /sdcard/__ui_verify_dump.xml"]


def test_uiautomator_dump_gives_up_after_retries(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda cmd, **kwargs: SimpleNamespace(stdout="", stderr="ERROR", returncode=1),
    )
    monkeypatch.setattr(time, "sleep", lambda s: None)

    with pytest.raises(AndroidControllerError, match="no UI dump"):
        AndroidController(serial="s").uiautomator_dump(
            local_path=tmp_path / "w.xml", max_attempts=2
        )
