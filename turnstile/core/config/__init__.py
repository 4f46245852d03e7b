"""
Configuration Package Initialization.

Provides a flat public API for the configuration schemas. Each schema
module is imported on first attribute access, so importing one submodule
(e.g. ``config.types``) does not load the whole manifest. pydantic itself
is always loaded with ``turnstile.core``, which re-exports ``Config``.

Architecture:
    - Lazy Import Pattern (PEP 562): Uses __getattr__ for on-demand loading
    - Caching: Loaded attributes cached in globals()

Example:
    >>> from turnstile.core.config import Config, SchedulerConfig
    >>> cfg = Config.from_args(args)
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "Config",
    "SchedulerConfig",
    "LaunchConfig",
    "TelemetryConfig",
    "ValidatedPath",
    "LogLevel",
]

# LAZY IMPORTS MAPPING
_LAZY_IMPORTS: dict[str, str] = {
    "Config": "turnstile.core.config.manifest",
    "SchedulerConfig": "turnstile.core.config.scheduler_config",
    "LaunchConfig": "turnstile.core.config.launch_config",
    "TelemetryConfig": "turnstile.core.config.telemetry_config",
    "ValidatedPath": "turnstile.core.config.types",
    "LogLevel": "turnstile.core.config.types",
}


def __getattr__(name: str) -> Any:
    """Load configuration attributes on first access."""
    target = _LAZY_IMPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    value = getattr(import_module(target), name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + __all__)
