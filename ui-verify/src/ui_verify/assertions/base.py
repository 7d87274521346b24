"""Shared assertion pipeline.

Every assertion follows the same shape: resolve the device, create the
artifact directory, poll a check, capture an optional screenshot, then build
the terminal result. Infrastructure errors (`UiVerifyError`) raised at any
point become an outer `OperationResult` failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Optional

from ui_verify.config import VerifyConfig
from ui_verify.device.artifacts import ArtifactStore
from ui_verify.device.base import DeviceBackend, DeviceInfo, UiSnapshot
from ui_verify.elements import ElementTarget, UIElement
from ui_verify.errors import DeviceNotBootedError, DeviceNotReadyError, UiVerifyError
from ui_verify.verification.matcher import MatchResult, find_target
from ui_verify.verification.polling import (
    CancellationToken,
    CheckFn,
    CheckOutcome,
    PollingOptions,
    PollOutcome,
    check_once,
    merge_polling_options,
    poll_until,
)
from ui_verify.verification.results import (
    OperationResult,
    VerificationArtifacts,
    VerificationResult,
    build_result,
    generate_verification_id,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifyContext:
    """Collaborators shared by every assertion call."""

    backend: DeviceBackend
    artifacts: ArtifactStore
    config: VerifyConfig = field(default_factory=VerifyConfig)

    @classmethod
    def create(
        cls,
        backend: DeviceBackend,
        *,
        config: Optional[VerifyConfig] = None,
        artifacts_dir: Optional[Path] = None,
    ) -> "VerifyContext":
        cfg = config or VerifyConfig()
        root = Path(artifacts_dir) if artifacts_dir is not None else cfg.artifacts_dir
        return cls(backend=backend, artifacts=ArtifactStore(root), config=cfg)

    def polling(self, options: Optional[PollingOptions]) -> PollingOptions:
        """Caller options as given (unset fields get module defaults), else the config's."""
        if options is not None:
            return merge_polling_options(options)
        return PollingOptions(
            timeout_ms=self.config.timeout_ms,
            poll_interval_ms=self.config.poll_interval_ms,
        )


async def resolve_device(ctx: VerifyContext, device_id: Optional[str] = None) -> DeviceInfo:
    if device_id:
        device = await ctx.backend.get_device(device_id)
        if not device.is_ready():
            raise DeviceNotReadyError(
                f"Device {device_id} is not ready (state: {device.state or 'unknown'})"
            )
        return device

    devices = await ctx.backend.list_running_devices()
    ready = [d for d in devices if d.is_ready()]
    if not ready:
        raise DeviceNotBootedError(
            "No running device found. Boot an emulator or connect a device first."
        )
    return ready[0]


@dataclass(frozen=True)
class ElementStateData:
    """Payload shared by element assertions."""

    element: Optional[UIElement] = None
    matched_by: Optional[str] = None
    total_elements_scanned: int = 0
    visibility_required: Optional[bool] = None
    was_visible: Optional[bool] = None
    was_enabled: Optional[bool] = None
    was_selected: Optional[bool] = None
    was_hittable: Optional[bool] = None


def element_check(
    ctx: VerifyContext,
    device: DeviceInfo,
    session_id: str,
    target: ElementTarget,
    evaluate: Callable[[MatchResult, UiSnapshot], CheckOutcome],
) -> CheckFn:
    """Check that snapshots the UI, locates `target` and applies `evaluate`."""

    async def _check() -> CheckOutcome:
        snapshot = await ctx.backend.inspect(device.id, session_id)
        return evaluate(find_target(snapshot.tree, target), snapshot)

    return _check


def _default_failure(outcome: PollOutcome) -> str:
    return outcome.last_error or "Condition not met"


async def _capture(
    ctx: VerifyContext, device: DeviceInfo, directory: Path, file_name: str
) -> List[Path]:
    path = directory / file_name
    try:
        info = await ctx.backend.screenshot(device.id, path)
    except Exception as e:  # screenshots never change the outcome
        logger.warning("screenshot capture failed (%s): %s", path, e)
        return []
    return [info.path]


async def run_assertion(
    ctx: VerifyContext,
    *,
    kind: str,
    target: str,
    session_id: str,
    make_check: Callable[[DeviceInfo], CheckFn],
    passed_message: Callable[[Any], str],
    failed_message: Callable[[PollOutcome], str] = _default_failure,
    device_id: Optional[str] = None,
    assertion_id: Optional[str] = None,
    polling: Optional[PollingOptions] = None,
    single_check: bool = False,
    capture_on_failure: bool = True,
    capture_on_success: bool = False,
    failure_screenshot: str = "failure.png",
    cancel: Optional[CancellationToken] = None,
    bundle_id: Optional[str] = None,
) -> OperationResult[VerificationResult[Any]]:
    start_time = datetime.now(timezone.utc)
    verification_id = assertion_id or generate_verification_id(kind)
    opts = ctx.polling(polling)
    if opts.description is None:
        opts = merge_polling_options(opts, description=f"{kind} {target}")

    logger.info(
        "assert %s: %s (session=%s%s)",
        kind,
        target,
        session_id,
        f", bundle={bundle_id}" if bundle_id else "",
    )
    try:
        device = await resolve_device(ctx, device_id)
        directory = ctx.artifacts.get_snapshot_directory(session_id, verification_id)
        check = make_check(device)
        if single_check:
            outcome = await check_once(check, description=opts.description)
        else:
            outcome = await poll_until(check, opts, cancel=cancel)
    except UiVerifyError as e:
        logger.warning("assert %s aborted [%s]: %s", kind, e.code.value, e)
        return OperationResult.from_error(e)

    screenshots: List[Path] = []
    if outcome.passed and capture_on_success:
        screenshots = await _capture(ctx, device, directory, "success.png")
    elif not outcome.passed and capture_on_failure:
        screenshots = await _capture(ctx, device, directory, failure_screenshot)

    data = outcome.last_data
    result = build_result(
        id=verification_id,
        type=kind,
        target=target,
        start_time=start_time,
        outcome=outcome,
        timeout_ms=opts.timeout_ms,
        passed_message=passed_message(data) if outcome.passed else "",
        failed_message="" if outcome.passed else failed_message(outcome),
        device=device,
        artifacts=VerificationArtifacts(screenshots=screenshots, directory=directory),
        data=data,
    )
    if result.passed:
        logger.info("assert %s passed: %s", kind, result.message)
    else:
        logger.warning("assert %s %s: %s", kind, result.status.value, result.message)
    return OperationResult.ok(result)
