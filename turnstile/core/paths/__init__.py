"""
Filesystem Authority Package.

Holds the well-known names and the runtime-directory heuristic used by
the cross-process lock.
"""

from .constants import (
    DEFAULT_ENV_VAR,
    LOCK_FILE_NAME,
    LOGGER_NAME,
    guess_global_runtime_dir,
)

__all__ = [
    "LOGGER_NAME",
    "LOCK_FILE_NAME",
    "DEFAULT_ENV_VAR",
    "guess_global_runtime_dir",
]
