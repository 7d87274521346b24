"""ui-verify: mobile UI verification and assertion engine.

Provides:
- bounded polling with pass/failed/timeout outcomes
- element matching over UI hierarchy snapshots
- element, log, crash and composite screen assertions
- a step interpreter and an Android (adb) device backend
"""

__version__ = "0.1.0"

__all__ = [
    "assertions",
    "cli",
    "config",
    "device",
    "elements",
    "errors",
    "steps",
    "verification",
]
