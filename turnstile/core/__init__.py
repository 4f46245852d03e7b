"""
Core Utilities Package

This package exposes the essential components for configuration, logging,
host environment management, project constants and errors. It also
includes the RootOrchestrator to manage the run lifecycle.
"""

# Command Line Interface
from .cli import build_parser, parse_args

# Configuration
from .config import (
    Config,
    LaunchConfig,
    SchedulerConfig,
    TelemetryConfig,
)

# Run Context
from .context import CancellationToken, RunContext, install_interrupt_handler

# Environment & Hardware
from .environment import (
    FileRWLock,
    LockHandle,
    TimeTracker,
    format_device_list,
    format_duration,
    open_or_create_file,
    strip_inherited_binding,
)

# Errors
from .errors import (
    BackendError,
    ConfigurationError,
    InvalidTemplateSyntax,
    LockError,
    ProcessSpawnError,
    ResourceRequestError,
    TurnstileError,
)

# Input/Output Utilities
from .io import load_config_from_yaml, save_config_as_yaml

# Logging
from .logger import (
    Logger,
    LogStyle,
    NullProgress,
    Reporter,
    WaitProgress,
    format_wait_status,
)

# Paths
from .paths import DEFAULT_ENV_VAR, LOCK_FILE_NAME, LOGGER_NAME, guess_global_runtime_dir

# Orchestration
from .orchestrator import RootOrchestrator

__all__ = [
    # CLI
    "build_parser",
    "parse_args",
    # Configuration
    "Config",
    "SchedulerConfig",
    "LaunchConfig",
    "TelemetryConfig",
    # Run Context
    "CancellationToken",
    "RunContext",
    "install_interrupt_handler",
    # Environment
    "FileRWLock",
    "LockHandle",
    "open_or_create_file",
    "format_device_list",
    "strip_inherited_binding",
    "TimeTracker",
    "format_duration",
    # Errors
    "TurnstileError",
    "ConfigurationError",
    "InvalidTemplateSyntax",
    "LockError",
    "BackendError",
    "ResourceRequestError",
    "ProcessSpawnError",
    # I/O
    "load_config_from_yaml",
    "save_config_as_yaml",
    # Logging
    "Logger",
    "LogStyle",
    "Reporter",
    "WaitProgress",
    "NullProgress",
    "format_wait_status",
    # Paths
    "LOGGER_NAME",
    "LOCK_FILE_NAME",
    "DEFAULT_ENV_VAR",
    "guess_global_runtime_dir",
    # Orchestration
    "RootOrchestrator",
]
