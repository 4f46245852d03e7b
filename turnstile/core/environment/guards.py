"""
Cross-Process Lock.

Provides a file-backed advisory read/write lock shared by every turnstile
instance on a host. The lock serializes the "enumerate idle devices, decide,
hold" critical section so two instances never claim overlapping devices.

- **Open-or-create** that tolerates concurrent creators and sticky,
  world-writable directories such as ``/tmp``.
- **Scoped acquisition** through context managers: the lock is released on
  every exit path, including exceptions, without relying on the garbage
  collector.

The lock file's contents are never read or written; it is only a mutex token.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, Optional

# Tentative import for Unix-specific file locking
try:
    import fcntl
    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from ..errors import LockError
from ..paths import LOCK_FILE_NAME, LOGGER_NAME, guess_global_runtime_dir

logger = logging.getLogger(LOGGER_NAME)


# =========================================================================== #
#                               File Handling                                 #
# =========================================================================== #

def open_or_create_file(path: Path) -> IO[bytes]:
    """
    Opens ``path`` for locking, creating it if it does not exist yet.

    A plain ``O_CREAT`` open is not used: with ``fs.protected_regular``
    enabled, Linux refuses ``O_CREAT`` on an existing file in a sticky
    world-writable directory unless the caller owns it. So the sequence is
    open, then exclusive create on ENOENT, then open again when another
    process won the creation race.

    Args:
        path: Lock file location.

    Returns:
        Binary file object suitable for ``flock``.

    Raises:
        OSError: For any failure other than the tolerated races.
    """
    try:
        return open(path, "rb")
    except FileNotFoundError:
        pass

    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_RDONLY, 0o666)
    except FileExistsError:
        # Created by a concurrent instance between our two attempts
        return open(path, "rb")

    f = os.fdopen(fd, "rb")
    if os.name == "posix":
        try:
            os.chmod(path, 0o777)
        except OSError as e:
            logger.warning(f"Failed to set permissions of lock file {path}: {e}")
    return f


def _abort_on_stuck_lock(path: Path, error: OSError) -> None:
    """Terminates the process; a lock that cannot be released blocks every other instance."""
    logger.critical(f"Failed to unlock {path}: {error}. Aborting to avoid a host-wide deadlock.")
    os._exit(1)


# =========================================================================== #
#                                 Lock Types                                  #
# =========================================================================== #

@dataclass
class LockHandle:
    """Possession of the host lock in one mode, valid inside its ``with`` block."""

    path: Path
    mode: str
    released: bool = False


class FileRWLock:
    """
    Shared/exclusive advisory lock over a well-known file.

    Each instance owns its own open file description, so two instances in
    one process exclude each other exactly like two separate processes.

    Attributes:
        path (Path): Lock file location.

    Example:
        >>> lock = FileRWLock()
        >>> with lock.acquire_exclusive():
        ...     idle = backend.enumerate()
    """

    def __init__(self, name: str = LOCK_FILE_NAME, runtime_dir: Optional[Path] = None):
        """
        Args:
            name: Lock file name inside the runtime directory.
            runtime_dir: Directory override; defaults to the platform guess.

        Raises:
            LockError: If locking is unsupported, the runtime directory is
                missing, or the lock file cannot be opened or created.
        """
        if not HAS_FCNTL:
            raise LockError("File locking requires fcntl, which is unavailable on this platform")

        base_dir = runtime_dir if runtime_dir is not None else guess_global_runtime_dir()
        if not base_dir.is_dir():
            raise LockError(f"The runtime directory does not exist: {base_dir}")

        self.path = base_dir / name
        try:
            self._file: Optional[IO[bytes]] = open_or_create_file(self.path)
        except OSError as e:
            raise LockError(f"Cannot open lock file {self.path}: {e}") from e

    @contextmanager
    def acquire_shared(self) -> Iterator[LockHandle]:
        """Blocks until the lock is granted in shared mode."""
        with self._locked(fcntl.LOCK_SH, "shared") as handle:
            yield handle

    @contextmanager
    def acquire_exclusive(self) -> Iterator[LockHandle]:
        """Blocks until the lock is granted in exclusive mode."""
        with self._locked(fcntl.LOCK_EX, "exclusive") as handle:
            yield handle

    read = acquire_shared
    write = acquire_exclusive

    @contextmanager
    def _locked(self, operation: int, mode: str) -> Iterator[LockHandle]:
        if self._file is None:
            raise LockError(f"Lock file {self.path} is already closed")

        try:
            fcntl.flock(self._file.fileno(), operation)
        except OSError as e:
            raise LockError(f"Cannot acquire {mode} lock on {self.path}: {e}") from e

        handle = LockHandle(path=self.path, mode=mode)
        logger.debug(f"Acquired {mode} lock on {self.path}")
        try:
            yield handle
        finally:
            try:
                fcntl.flock(self._file.fileno(), fcntl.LOCK_UN)
            except OSError as e:
                _abort_on_stuck_lock(self.path, e)
            handle.released = True
            logger.debug(f"Released {mode} lock on {self.path}")

    def close(self) -> None:
        """Closes the lock file; any lock still held by it is dropped by the OS."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "FileRWLock":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
