"""
Run Context & Cooperative Cancellation.

The cancellation flag and the device backend are passed explicitly to
every component through a RunContext instead of living in module globals,
so the scheduler, monitor and supervisor can be exercised in isolation.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import signal
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from .paths import LOGGER_NAME

if TYPE_CHECKING:  # pragma: no cover
    from ..backends.base import ResourceBackend


class CancellationToken:
    """
    Externally set, read-only-for-consumers cancellation flag.

    Components poll ``cancelled`` at well-defined points and use ``wait``
    for their sleeps, which returns early once cancellation is requested.
    Nothing in flight is interrupted.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def wait(self, timeout: float) -> bool:
        """Sleeps up to ``timeout`` seconds; returns True if cancelled."""
        return self._event.wait(timeout)


def install_interrupt_handler(
    token: CancellationToken,
    logger: Optional[logging.Logger] = None,
) -> Callable[[], None]:
    """
    Routes SIGINT to ``token`` instead of raising KeyboardInterrupt.

    The child shares the terminal's process group, so Ctrl+C reaches it
    directly; turnstile only stops its own bookkeeping.

    Args:
        token: Flag to set on interrupt.
        logger: Logger for the interrupt notice.

    Returns:
        Callable restoring the previous handler. A no-op when called off
        the main thread, where handlers cannot be installed.
    """
    log = logger or logging.getLogger(LOGGER_NAME)

    if threading.current_thread() is not threading.main_thread():
        log.warning("Not on the main thread: Ctrl+C handler not installed")
        return lambda: None

    def _on_interrupt(signum, frame) -> None:
        log.info("Ctrl+C received, exiting...")
        token.cancel()

    previous = signal.signal(signal.SIGINT, _on_interrupt)

    def _restore() -> None:
        signal.signal(signal.SIGINT, previous)

    return _restore


@dataclass
class RunContext:
    """
    Explicit per-run state shared by the admission and launch phases.

    Attributes:
        backend: Device backend used for enumeration, holds and usage checks.
        cancel: Cooperative cancellation flag.
        logger: Run logger.
    """

    backend: "ResourceBackend"
    cancel: CancellationToken = field(default_factory=CancellationToken)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(LOGGER_NAME))
