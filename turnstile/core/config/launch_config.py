"""
Command Launch Configuration Schema.

Describes the command to run once devices are claimed, how the claimed
device list is exposed to it, and how often the release monitor checks
whether the command has taken the devices over.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
from typing import List

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from pydantic import BaseModel, ConfigDict, Field, field_validator

# =========================================================================== #
#                               Internal Imports                              #
# =========================================================================== #
from .types import EnvVarName, PollSeconds
from ..paths import DEFAULT_ENV_VAR

# =========================================================================== #
#                             LAUNCH CONFIGURATION                            #
# =========================================================================== #


class LaunchConfig(BaseModel):
    """
    Child command and its device binding policy.

    Attributes:
        command: Program followed by its arguments. ``{}`` in any argument
            is replaced with the claimed ids, ``{{``/``}}`` escape braces.
        force_env: Bind ``env_var`` even when the command uses ``{}``.
        env_var: Environment variable receiving the comma-joined ids.
        monitor_interval: Seconds between takeover checks per device.
    """
    model_config = ConfigDict(
        frozen=True,
        extra="forbid"
    )

    command: List[str] = Field(default_factory=list)
    force_env: bool = False
    env_var: EnvVarName = DEFAULT_ENV_VAR
    monitor_interval: PollSeconds = 0.1

    @field_validator("command")
    @classmethod
    def check_program(cls, v: List[str]) -> List[str]:
        if v and not v[0]:
            raise ValueError("Program name must not be empty")
        return v
