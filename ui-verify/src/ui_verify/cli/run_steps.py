from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from ui_verify.assertions.base import VerifyContext
from ui_verify.assertions.screen import load_screens
from ui_verify.config import load_config
from ui_verify.device.android import AndroidBackend, AndroidController
from ui_verify.loader import SchemaValidationError
from ui_verify.steps.interpreter import (
    StepBatchResult,
    StepValidationError,
    execute_steps,
    load_steps_file,
)
from ui_verify.steps.registry import StepEnv


def _summary(batch: StepBatchResult, *, session_id: str) -> Dict[str, Any]:
    return {
        "session_id": session_id,
        "success": batch.success,
        "passed": batch.passed,
        "failed": batch.failed,
        "skipped": batch.skipped,
        "duration_ms": batch.duration_ms,
        "steps": [
            {
                "type": r.step_type,
                "description": r.step.get("description"),
                "success": r.success,
                "skipped": r.skipped,
                "failure_reason": r.failure_reason,
                "error": r.error,
                "duration_ms": r.duration_ms,
                "attempts": len(r.verification.attempts) if r.verification else 0,
                "artifacts": [str(p) for p in r.artifacts],
            }
            for r in batch.results
        ],
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run a UI verification steps file against an Android device."
    )
    parser.add_argument("--steps", type=Path, required=True, help="Steps file (YAML/JSON).")
    parser.add_argument(
        "--screens",
        type=Path,
        default=None,
        help="Optional screen definitions file; merged over screens declared in --steps.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Optional config file.")
    parser.add_argument(
        "--session_id",
        type=str,
        default=None,
        help="Session id used for artifact directories (default: from steps file or random).",
    )
    parser.add_argument(
        "--android_serial",
        type=str,
        default=os.environ.get("UI_VERIFY_SERIAL"),
        help="adb serial of the target device (default: first running device).",
    )
    parser.add_argument("--adb_path", type=str, default=None, help="adb binary (default: adb).")
    parser.add_argument(
        "--artifacts_dir", type=Path, default=None, help="Root directory for screenshots."
    )
    parser.add_argument(
        "--timeout_ms", type=int, default=None, help="Default polling timeout per step."
    )
    parser.add_argument(
        "--stop_on_failure",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Skip remaining steps after a failure (default: from steps file, else on).",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=getattr(logging, args.log_level), format="[%(levelname)s] %(name)s: %(message)s"
    )

    try:
        cfg = load_config(
            args.config,
            adb_path=args.adb_path,
            serial=args.android_serial,
            artifacts_dir=args.artifacts_dir,
            timeout_ms=args.timeout_ms,
        )
        steps_file = load_steps_file(args.steps)
        screens = dict(steps_file.screens)
        if args.screens is not None:
            screens.update(load_screens(args.screens))
    except (FileNotFoundError, ValueError, SchemaValidationError, StepValidationError) as e:
        print(f"[ERROR] {e}")
        return 2

    session_id = args.session_id or steps_file.session_id or f"session-{uuid.uuid4().hex[:8]}"
    backend = AndroidBackend(AndroidController(adb_path=cfg.adb_path))
    ctx = VerifyContext.create(backend, config=cfg)
    env = StepEnv(
        session_id=session_id,
        device_id=cfg.serial or steps_file.device_id,
        bundle_id=steps_file.bundle_id,
        screens=screens,
    )
    stop_on_failure = (
        steps_file.stop_on_failure if args.stop_on_failure is None else args.stop_on_failure
    )

    batch = asyncio.run(
        execute_steps(ctx, steps_file.steps, env, stop_on_failure=stop_on_failure)
    )
    print(json.dumps(_summary(batch, session_id=session_id), indent=2, ensure_ascii=False))
    return 0 if batch.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
