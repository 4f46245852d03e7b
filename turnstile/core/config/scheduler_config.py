"""
Admission Scheduler Configuration Schema.

Declares how many devices to wait for, how often to poll, and where the
host-wide lock file lives.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
from pathlib import Path
from typing import Optional

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from pydantic import BaseModel, ConfigDict, Field

# =========================================================================== #
#                               Internal Imports                              #
# =========================================================================== #
from .types import LockName, PollSeconds, ResourceCount, ValidatedPath
from ..paths import LOCK_FILE_NAME, guess_global_runtime_dir

# =========================================================================== #
#                           SCHEDULER CONFIGURATION                           #
# =========================================================================== #


class SchedulerConfig(BaseModel):
    """
    Admission policy: request size, poll cadence and lock location.
    """
    model_config = ConfigDict(
        frozen=True,
        extra="forbid"
    )

    num_resources: ResourceCount = Field(
        default=1,
        description="How many devices to claim."
    )
    poll_interval: PollSeconds = Field(
        default=1.0,
        description="Seconds between idle checks while waiting."
    )
    lock_name: LockName = LOCK_FILE_NAME
    runtime_dir: Optional[ValidatedPath] = Field(
        default=None,
        description="Override for the shared runtime directory holding the lock file."
    )

    @property
    def resolved_runtime_dir(self) -> Path:
        """Runtime directory in effect (override or platform guess)."""
        return self.runtime_dir if self.runtime_dir is not None else guess_global_runtime_dir()

    @property
    def lock_file_path(self) -> Path:
        """Location of the lock file shared by every instance on this host."""
        return self.resolved_runtime_dir / self.lock_name
