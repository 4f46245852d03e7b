"""
Pytest Configuration and Shared Fixtures for the Turnstile Test Suite.

This module provides reusable fixtures for the admission and launch tests:
- An in-memory FakeBackend standing in for GPUs
- RunContext instances wired to the fake backend
- A temporary runtime directory for real lock files
- CLI argument namespaces for configuration tests

Fixtures are automatically discovered by pytest across all test modules.
"""

# Standard Imports
import argparse
import logging
import threading
from typing import Dict, List, Optional, Set

# Third-Party Imports
import pytest

# Internal Imports
from turnstile.backends.base import ResourceHold
from turnstile.core.context import CancellationToken, RunContext
from turnstile.core.errors import BackendError


# FAKE BACKEND
class FakeBackend:
    """
    In-memory ResourceBackend.

    ``busy`` marks devices used by foreign work; holds count as one user
    of the device, and ``takeover`` adds a second user (the launched
    command) to a device.
    """

    def __init__(self, count: int = 4, busy: Optional[Set[int]] = None):
        self.count = count
        self.busy: Set[int] = set(busy or ())
        self.held: Dict[int, ResourceHold] = {}
        self.taken_over: Set[int] = set()
        self.released: List[int] = []
        self.hold_calls: List[int] = []
        self.fail_hold_on: Set[int] = set()
        self.fail_enumerate = False
        self.fail_usage_check = False
        self._mutex = threading.Lock()

    def device_count(self) -> int:
        return self.count

    def enumerate(self):
        if self.fail_enumerate:
            raise BackendError("enumeration failed")
        with self._mutex:
            return [
                (rid, rid not in self.busy and rid not in self.held and rid not in self.taken_over)
                for rid in range(self.count)
            ]

    def hold(self, resource_id: int) -> ResourceHold:
        self.hold_calls.append(resource_id)
        if resource_id in self.fail_hold_on:
            raise BackendError("out of memory", resource_id=resource_id)
        hold = ResourceHold(resource_id=resource_id, payload=object())
        with self._mutex:
            self.held[resource_id] = hold
        return hold

    def release(self, hold: ResourceHold) -> None:
        with self._mutex:
            self.held.pop(hold.resource_id, None)
            self.released.append(hold.resource_id)
        hold.payload = None

    def usage_exceeds_placeholder(self, resource_id: int) -> bool:
        if self.fail_usage_check:
            raise BackendError("usage query failed", resource_id=resource_id)
        with self._mutex:
            return resource_id in self.taken_over

    def takeover(self, resource_id: int) -> None:
        with self._mutex:
            self.taken_over.add(resource_id)


# BACKEND & CONTEXT FIXTURES
@pytest.fixture
def fake_backend():
    """Four idle fake devices."""
    return FakeBackend(count=4)


@pytest.fixture
def run_logger():
    """Quiet logger for components under test."""
    logger = logging.getLogger("turnstile.tests")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def run_ctx(fake_backend, run_logger):
    """RunContext over the fake backend with a fresh CancellationToken."""
    return RunContext(backend=fake_backend, cancel=CancellationToken(), logger=run_logger)


# FILESYSTEM FIXTURES
@pytest.fixture
def runtime_dir(tmp_path):
    """Temporary directory standing in for the shared runtime directory."""
    path = tmp_path / "runtime"
    path.mkdir()
    return path


# CLI FIXTURES
@pytest.fixture
def basic_args():
    """Namespace as produced by parse_args with every option omitted."""
    return argparse.Namespace(
        num=None,
        poll_interval=None,
        lock_name=None,
        runtime_dir=None,
        force_env=None,
        env_var=None,
        monitor_interval=None,
        config=None,
        log_level=None,
        log_dir=None,
        show_progress=None,
        command=["python", "train.py"],
    )


# LOGGING FIXTURES
@pytest.fixture
def turnstile_caplog(caplog):
    """caplog wired to the package logger, which does not propagate."""
    logger = logging.getLogger("turnstile")
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="turnstile")
    yield caplog
    logger.removeHandler(caplog.handler)
