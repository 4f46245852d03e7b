"""
Telemetry and Reporting Package.

Available Components:
    - Logger: Static utility for stream and file logging initialization.
    - Reporter: Startup, claim and outcome reporting.
    - LogStyle: Unified logging style constants.
    - WaitProgress / NullProgress: Status sinks for the admission loop.
"""

from .logger import Logger
from .progress import (
    NullProgress,
    ProgressSinkProtocol,
    WaitProgress,
    format_wait_status,
)
from .reporter import Reporter, ReporterProtocol
from .styles import LogStyle

__all__ = [
    "Logger",
    "Reporter",
    "ReporterProtocol",
    "LogStyle",
    "WaitProgress",
    "NullProgress",
    "ProgressSinkProtocol",
    "format_wait_status",
]
