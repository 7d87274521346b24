from __future__ import annotations

import json
from pathlib import Path

from fakes import FakeBackend, app, el

from ui_verify.cli import run_steps


def _write_steps(tmp_path: Path, body: str) -> Path:
    p = tmp_path / "steps.yaml"
    p.write_text(body, encoding="utf-8")
    return p


def _use_fake_backend(monkeypatch, backend: FakeBackend) -> None:
    monkeypatch.setattr(run_steps, "AndroidBackend", lambda controller: backend)


def test_cli_runs_steps_and_prints_summary(monkeypatch, tmp_path: Path, capsys) -> None:
    _use_fake_backend(monkeypatch, FakeBackend(trees=[app(el(identifier="submit"))]))
    steps = _write_steps(
        tmp_path,
        "session_id: smoke\n"
        "steps:\n"
        "  - type: assert_visible\n"
        "    target: '#submit'\n"
        "    description: submit button shows\n",
    )

    rc = run_steps.main(["--steps", str(steps), "--artifacts_dir", str(tmp_path / "out")])

    assert rc == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["session_id"] == "smoke"
    assert summary["success"] is True
    assert summary["steps"][0]["description"] == "submit button shows"
    assert summary["steps"][0]["attempts"] == 1
    assert (tmp_path / "out" / "smoke" / "assertions").is_dir()


def test_cli_returns_one_on_failed_step(monkeypatch, tmp_path: Path, capsys) -> None:
    _use_fake_backend(monkeypatch, FakeBackend(trees=[app()]))
    steps = _write_steps(
        tmp_path,
        "steps:\n"
        "  - type: assert_visible\n"
        "    target: '#submit'\n"
        "  - type: assert_not_visible\n"
        "    target: '#spinner'\n",
    )

    rc = run_steps.main(
        [
            "--steps", str(steps),
            "--artifacts_dir", str(tmp_path / "out"),
            "--timeout_ms", "50",
            "--session_id", "cli",
        ]
    )

    assert rc == 1
    summary = json.loads(capsys.readouterr().out)
    assert [s["failure_reason"] for s in summary["steps"]] == ["TIMEOUT", None]
    assert summary["skipped"] == 1
    assert summary["steps"][0]["artifacts"][0].endswith("failure.png")


def test_cli_no_stop_on_failure(monkeypatch, tmp_path: Path, capsys) -> None:
    _use_fake_backend(monkeypatch, FakeBackend(trees=[app()]))
    steps = _write_steps(
        tmp_path,
        "steps:\n"
        "  - type: assert_visible\n"
        "    target: '#submit'\n"
        "    timeout: 0\n"
        "  - type: assert_not_visible\n"
        "    target: '#spinner'\n",
    )

    rc = run_steps.main(
        ["--steps", str(steps), "--artifacts_dir", str(tmp_path), "--no-stop_on_failure"]
    )

    assert rc == 1
    summary = json.loads(capsys.readouterr().out)
    assert [s["success"] for s in summary["steps"]] == [False, True]
    assert summary["skipped"] == 0


def test_cli_rejects_invalid_steps_file(tmp_path: Path, capsys) -> None:
    steps = _write_steps(tmp_path, "steps:\n  - type: swipe\n")
    rc = run_steps.main(["--steps", str(steps)])
    assert rc == 2
    assert "[ERROR]" in capsys.readouterr().out


def test_cli_missing_steps_file(tmp_path: Path) -> None:
    assert run_steps.main(["--steps", str(tmp_path / "nope.yaml")]) == 2
