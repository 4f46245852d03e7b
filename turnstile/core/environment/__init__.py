"""
Environment & Infrastructure Abstraction Layer.

Host-level primitives: the cross-process lock, process environment
helpers for the device binding, and run timing.
"""

# Cross-process lock (from .guards)
from .guards import FileRWLock, LockHandle, open_or_create_file

# Device binding helpers (from .hardware)
from .hardware import format_device_list, strip_inherited_binding

# Timing (from .timing)
from .timing import TimeTracker, TimeTrackerProtocol, format_duration

__all__ = [
    # Guards
    "FileRWLock",
    "LockHandle",
    "open_or_create_file",
    # Hardware
    "format_device_list",
    "strip_inherited_binding",
    # Timing
    "TimeTracker",
    "TimeTrackerProtocol",
    "format_duration",
]
