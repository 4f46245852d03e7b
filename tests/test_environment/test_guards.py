"""
Test Suite for the Cross-Process Lock.

Tests lock file creation, shared/exclusive semantics against a second
open file description, release on every exit path, and the abort on a
failed unlock.
"""

# =========================================================================== #
#                         Standard Imports                                    #
# =========================================================================== #
import fcntl
import os
import stat
import threading
import time
from unittest.mock import patch

# =========================================================================== #
#                         Third-Party Imports                                 #
# =========================================================================== #
import pytest

# =========================================================================== #
#                         Internal Imports                                    #
# =========================================================================== #
from turnstile.core.environment import FileRWLock, open_or_create_file
from turnstile.core.errors import LockError


def _try_flock(path, operation) -> bool:
    """Attempts a non-blocking flock on a fresh descriptor."""
    fd = os.open(path, os.O_RDONLY)
    try:
        fcntl.flock(fd, operation | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    else:
        fcntl.flock(fd, fcntl.LOCK_UN)
        return True
    finally:
        os.close(fd)


# =========================================================================== #
#                    OPEN OR CREATE                                           #
# =========================================================================== #


@pytest.mark.unit
def test_open_or_create_creates_world_writable_file(runtime_dir):
    path = runtime_dir / "fresh.lock"

    with open_or_create_file(path) as f:
        assert f.readable()

    assert path.exists()
    assert stat.S_IMODE(path.stat().st_mode) == 0o777


@pytest.mark.unit
def test_open_or_create_reuses_existing_file(runtime_dir):
    path = runtime_dir / "existing.lock"
    path.write_bytes(b"keep")

    with open_or_create_file(path):
        pass

    assert path.read_bytes() == b"keep"


@pytest.mark.unit
def test_open_or_create_tolerates_creation_race(runtime_dir):
    """A concurrent creator winning between open and O_EXCL is not an error."""
    path = runtime_dir / "race.lock"
    real_os_open = os.open

    def racing_open(p, flags, mode=0o777):
        os.close(real_os_open(p, flags, mode))
        raise FileExistsError(p)

    with patch("turnstile.core.environment.guards.os.open", side_effect=racing_open):
        with open_or_create_file(path) as f:
            assert f.readable()


@pytest.mark.unit
def test_chmod_failure_only_warns(runtime_dir, turnstile_caplog):
    path = runtime_dir / "nochmod.lock"

    with patch("turnstile.core.environment.guards.os.chmod", side_effect=PermissionError("denied")):
        with open_or_create_file(path):
            pass

    assert path.exists()
    assert "Failed to set permissions" in turnstile_caplog.text


# =========================================================================== #
#                    CONSTRUCTION                                             #
# =========================================================================== #


@pytest.mark.unit
def test_lock_path_inside_runtime_dir(runtime_dir):
    with FileRWLock(name="gpu.lock", runtime_dir=runtime_dir) as lock:
        assert lock.path == runtime_dir / "gpu.lock"
        assert lock.path.exists()


@pytest.mark.unit
def test_missing_runtime_dir_is_fatal(tmp_path):
    with pytest.raises(LockError, match="does not exist"):
        FileRWLock(name="gpu.lock", runtime_dir=tmp_path / "missing")


@pytest.mark.unit
@patch("turnstile.core.environment.guards.HAS_FCNTL", False)
def test_missing_fcntl_is_fatal(runtime_dir):
    with pytest.raises(LockError, match="fcntl"):
        FileRWLock(runtime_dir=runtime_dir)


@pytest.mark.unit
def test_unopenable_lock_file_raises_lock_error(runtime_dir):
    with patch(
        "turnstile.core.environment.guards.open_or_create_file",
        side_effect=PermissionError("denied"),
    ):
        with pytest.raises(LockError, match="Cannot open lock file"):
            FileRWLock(runtime_dir=runtime_dir)


@pytest.mark.unit
def test_default_runtime_dir_uses_platform_guess(runtime_dir):
    with patch(
        "turnstile.core.environment.guards.guess_global_runtime_dir",
        return_value=runtime_dir,
    ):
        with FileRWLock() as lock:
            assert lock.path == runtime_dir / "gpu-waiter.lock"


# =========================================================================== #
#                    LOCK SEMANTICS                                           #
# =========================================================================== #


@pytest.mark.unit
def test_exclusive_excludes_everyone(runtime_dir):
    with FileRWLock(runtime_dir=runtime_dir) as lock:
        with lock.acquire_exclusive() as handle:
            assert handle.mode == "exclusive"
            assert not _try_flock(lock.path, fcntl.LOCK_SH)
            assert not _try_flock(lock.path, fcntl.LOCK_EX)

        assert handle.released
        assert _try_flock(lock.path, fcntl.LOCK_EX)


@pytest.mark.unit
def test_shared_admits_readers_only(runtime_dir):
    with FileRWLock(runtime_dir=runtime_dir) as lock:
        with lock.read() as handle:
            assert handle.mode == "shared"
            assert _try_flock(lock.path, fcntl.LOCK_SH)
            assert not _try_flock(lock.path, fcntl.LOCK_EX)


@pytest.mark.unit
def test_released_when_body_raises(runtime_dir):
    with FileRWLock(runtime_dir=runtime_dir) as lock:
        with pytest.raises(ValueError):
            with lock.write():
                raise ValueError("boom")

        assert _try_flock(lock.path, fcntl.LOCK_EX)


@pytest.mark.unit
def test_closed_lock_cannot_be_acquired(runtime_dir):
    lock = FileRWLock(runtime_dir=runtime_dir)
    lock.close()
    lock.close()

    with pytest.raises(LockError, match="closed"):
        with lock.acquire_exclusive():
            pass  # pragma: no cover


@pytest.mark.unit
def test_acquire_failure_raises_lock_error(runtime_dir):
    with FileRWLock(runtime_dir=runtime_dir) as lock:
        with patch("turnstile.core.environment.guards.fcntl.flock", side_effect=OSError("EIO")):
            with pytest.raises(LockError, match="exclusive"):
                with lock.acquire_exclusive():
                    pass  # pragma: no cover


@pytest.mark.unit
def test_unlock_failure_aborts_process(runtime_dir, turnstile_caplog):
    real_flock = fcntl.flock

    def flock(fd, operation):
        if operation == fcntl.LOCK_UN:
            raise OSError("EIO")
        return real_flock(fd, operation)

    with FileRWLock(runtime_dir=runtime_dir) as lock:
        with patch("turnstile.core.environment.guards.fcntl.flock", side_effect=flock), \
             patch("turnstile.core.environment.guards.os._exit") as mock_exit:
            with lock.acquire_exclusive():
                pass

        mock_exit.assert_called_once_with(1)
        assert "Failed to unlock" in turnstile_caplog.text


@pytest.mark.integration
def test_two_instances_serialize_critical_sections(runtime_dir):
    """Separate FileRWLock instances in one process exclude each other."""
    inside = []
    overlaps = []
    guard = threading.Lock()

    def worker():
        with FileRWLock(name="serial.lock", runtime_dir=runtime_dir) as lock:
            for _ in range(5):
                with lock.acquire_exclusive():
                    with guard:
                        if inside:
                            overlaps.append(True)
                        inside.append(True)
                    time.sleep(0.005)
                    with guard:
                        inside.pop()

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5.0)

    assert overlaps == []
