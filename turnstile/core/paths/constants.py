"""
Project Constants and Runtime Directory Resolution.

Centralizes the names shared by every invocation on a host (lock file,
logger, environment binding) and the heuristic that picks a runtime
directory visible to unrelated processes.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import os
import sys
from pathlib import Path
from typing import Final

# =========================================================================== #
#                                 IDENTIFIERS                                 #
# =========================================================================== #

LOGGER_NAME: Final[str] = "turnstile"

# Kept compatible with earlier releases so mixed versions still exclude each other
LOCK_FILE_NAME: Final[str] = "gpu-waiter.lock"

DEFAULT_ENV_VAR: Final[str] = "CUDA_VISIBLE_DEVICES"

# =========================================================================== #
#                              RUNTIME DIRECTORY                              #
# =========================================================================== #


def _is_android() -> bool:
    return "ANDROID_ROOT" in os.environ or hasattr(sys, "getandroidapilevel")


def guess_global_runtime_dir() -> Path:
    """
    Picks a directory shared by every user and process on this host.

    The directory is not created: a missing directory means the heuristic
    is wrong for this platform and callers should fail loudly.

    Returns:
        Platform-appropriate shared temporary directory.

    Raises:
        RuntimeError: On platforms with no known shared directory.
    """
    if sys.platform == "win32":
        return Path("C:\\ProgramData")
    if _is_android():
        return Path("/data/local/tmp")
    if os.name == "posix":
        return Path("/tmp")
    raise RuntimeError(f"Unsupported platform: {sys.platform}")
