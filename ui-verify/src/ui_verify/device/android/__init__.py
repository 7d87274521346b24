"""Android (adb / uiautomator / logcat) device backend."""

from ui_verify.device.android.backend import AndroidBackend
from ui_verify.device.android.controller import AndroidController, AndroidControllerError

__all__ = ["AndroidBackend", "AndroidController", "AndroidControllerError"]
