"""
Run Configuration Manifest.

Aggregates the scheduler, launch and telemetry schemas into one immutable
object and builds it from CLI arguments, optionally layered over a YAML
file. Explicit CLI values always win over YAML values, which win over
schema defaults.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import argparse
from pathlib import Path
from typing import Any, Dict, Final, Tuple

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

# =========================================================================== #
#                               Internal Imports                              #
# =========================================================================== #
from .launch_config import LaunchConfig
from .scheduler_config import SchedulerConfig
from .telemetry_config import TelemetryConfig
from ..errors import ConfigurationError
from ..io import load_config_from_yaml

# (section, field, argparse dest)
_CLI_OVERRIDES: Final[Tuple[Tuple[str, str, str], ...]] = (
    ("scheduler", "num_resources", "num"),
    ("scheduler", "poll_interval", "poll_interval"),
    ("scheduler", "lock_name", "lock_name"),
    ("scheduler", "runtime_dir", "runtime_dir"),
    ("launch", "force_env", "force_env"),
    ("launch", "env_var", "env_var"),
    ("launch", "monitor_interval", "monitor_interval"),
    ("telemetry", "log_level", "log_level"),
    ("telemetry", "log_dir", "log_dir"),
    ("telemetry", "show_progress", "show_progress"),
)

_SECTIONS: Final[Tuple[str, ...]] = ("scheduler", "launch", "telemetry")


class Config(BaseModel):
    """
    Validated blueprint consumed by RootOrchestrator.
    """
    model_config = ConfigDict(
        frozen=True,
        extra="forbid"
    )

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    launch: LaunchConfig = Field(default_factory=LaunchConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @model_validator(mode="after")
    def validate_logic(self) -> "Config":
        if self.launch.monitor_interval > self.scheduler.poll_interval:
            raise ValueError(
                f"monitor_interval ({self.launch.monitor_interval}) exceeds "
                f"poll_interval ({self.scheduler.poll_interval})"
            )
        return self

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "Config":
        """
        Builds the manifest from parsed CLI arguments.

        Args:
            args: Namespace produced by ``parse_args``. Options left at
                ``None`` fall back to the YAML file, then to defaults.

        Returns:
            Validated Config instance.

        Raises:
            ConfigurationError: On unknown YAML sections, a missing command
                or any schema violation.
        """
        sections = cls._load_yaml_sections(getattr(args, "config", None))

        for section, field, dest in _CLI_OVERRIDES:
            value = getattr(args, dest, None)
            if value is not None:
                sections[section][field] = value

        command = list(getattr(args, "command", None) or [])
        if command and command[0] == "--":
            command = command[1:]
        if command:
            sections["launch"]["command"] = command
        if not sections["launch"].get("command"):
            raise ConfigurationError("No command given to run once devices are claimed")

        try:
            return cls(**sections)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    @staticmethod
    def _load_yaml_sections(config_path: Any) -> Dict[str, Dict[str, Any]]:
        raw: Dict[str, Any] = {}
        if config_path:
            try:
                raw = load_config_from_yaml(Path(config_path)) or {}
            except FileNotFoundError as e:
                raise ConfigurationError(str(e)) from e
            if not isinstance(raw, dict):
                raise ConfigurationError(f"Top level of {config_path} must be a mapping")

        unknown = set(raw) - set(_SECTIONS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        return {name: dict(raw.get(name) or {}) for name in _SECTIONS}
