"""
Telemetry Configuration Schema.

Controls log verbosity, optional persistent log files and the waiting
spinner.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from .types import LogLevel, ValidatedPath


class TelemetryConfig(BaseModel):
    """Logging and progress display policy."""
    model_config = ConfigDict(
        frozen=True,
        extra="forbid"
    )

    log_level: LogLevel = "INFO"
    log_dir: Optional[ValidatedPath] = None
    show_progress: bool = True
