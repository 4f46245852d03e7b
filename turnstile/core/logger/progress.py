"""
Waiting Progress Display.

A tqdm spinner shows the admission loop's status while it waits for idle
devices. Log records emitted meanwhile are routed through tqdm so they do
not tear the spinner line.
"""

# Standard Imports
import logging
from contextlib import ExitStack
from datetime import datetime
from typing import List, Optional, Protocol

# Third-Party Imports
from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm


def format_wait_status(found: int, requested: int, checked_at: Optional[datetime] = None) -> str:
    """Status line shown while waiting, e.g. ``(1 available, 2 requested)``."""
    checked_at = checked_at or datetime.now()
    return (
        f"Waiting for idle GPUs... ({found} available, {requested} requested) "
        f"[Last check: {checked_at.strftime('%H:%M:%S')}]"
    )


class ProgressSinkProtocol(Protocol):
    """Receives human-readable status updates during polling."""

    def update(self, found: int, requested: int) -> None:
        ...  # pragma: no cover

    def close(self) -> None:
        ...  # pragma: no cover


class NullProgress:
    """Progress sink that records statuses without drawing anything."""

    def __init__(self) -> None:
        self.statuses: List[str] = []
        self.closed = False

    def update(self, found: int, requested: int) -> None:
        self.statuses.append(format_wait_status(found, requested))

    def close(self) -> None:
        self.closed = True


class WaitProgress:
    """
    tqdm-backed spinner for the admission loop.

    Args:
        loggers: Loggers whose console output is redirected through tqdm
            while the spinner is visible.
    """

    def __init__(self, loggers: Optional[List[logging.Logger]] = None):
        self._stack = ExitStack()
        self._stack.enter_context(logging_redirect_tqdm(loggers=loggers))
        self._bar = tqdm(
            total=None,
            bar_format="{desc} {elapsed}",
            desc="Waiting for idle GPUs...",
            leave=False,
            dynamic_ncols=True,
        )

    def update(self, found: int, requested: int) -> None:
        self._bar.set_description_str(format_wait_status(found, requested))
        self._bar.update(1)

    def close(self) -> None:
        self._bar.close()
        self._stack.close()
