"""Error codes and infrastructure error types.

Assertion outcomes (failed/timeout) are never raised. The exceptions here are
for conditions that prevent a check from being evaluated at all; assertion
entry points convert them into an outer `OperationResult` failure.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    DEVICE_NOT_BOOTED = "DEVICE_NOT_BOOTED"
    DEVICE_NOT_FOUND = "DEVICE_NOT_FOUND"
    DEVICE_NOT_READY = "DEVICE_NOT_READY"
    SNAPSHOT_FAILED = "SNAPSHOT_FAILED"
    LOG_RETRIEVAL_FAILED = "LOG_RETRIEVAL_FAILED"
    ARTIFACT_DIR_FAILED = "ARTIFACT_DIR_FAILED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    COMMAND_FAILED = "COMMAND_FAILED"


class UiVerifyError(RuntimeError):
    """Base class for errors that abort an assertion before it can be evaluated."""

    code: ErrorCode = ErrorCode.COMMAND_FAILED

    def __init__(self, message: str, *, code: Optional[ErrorCode] = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class DeviceNotBootedError(UiVerifyError):
    code = ErrorCode.DEVICE_NOT_BOOTED


class DeviceNotFoundError(UiVerifyError):
    code = ErrorCode.DEVICE_NOT_FOUND


class DeviceNotReadyError(UiVerifyError):
    code = ErrorCode.DEVICE_NOT_READY


class SnapshotError(UiVerifyError):
    code = ErrorCode.SNAPSHOT_FAILED


class LogRetrievalError(UiVerifyError):
    code = ErrorCode.LOG_RETRIEVAL_FAILED


class ArtifactError(UiVerifyError):
    code = ErrorCode.ARTIFACT_DIR_FAILED


class InvalidArgumentError(UiVerifyError):
    code = ErrorCode.INVALID_ARGUMENT
