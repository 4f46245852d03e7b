"""
Release Monitor.

A placeholder hold keeps a claimed device looking busy to other waiting
instances until the launched command starts using it. From then on the
placeholder only competes with the real workload, so this background
thread watches each held device and reports the moment real usage
appears, letting the supervisor drop that hold.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import queue
import threading
from typing import TYPE_CHECKING, List, Sequence

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from .events import MonitorClosed, MonitorFailed, ResourceUsed, SupervisorEvent
from ..backends.base import ResourceId

if TYPE_CHECKING:  # pragma: no cover
    from ..core.context import RunContext


class ReleaseMonitor(threading.Thread):
    """
    Polls held devices for takeover and posts events to ``events``.

    The monitor keeps its own list of devices still to watch and never
    touches the ClaimSet; the supervisor owns the holds and acts on the
    posted events.

    Ends with exactly one terminal event: MonitorClosed once every device
    was reported (or on stop/cancel), or MonitorFailed on the first error.

    Args:
        ctx: Run context (backend, cancellation).
        resource_ids: Devices to watch.
        events: Queue shared with the supervisor.
        interval: Seconds between sweeps.
    """

    def __init__(
        self,
        ctx: "RunContext",
        resource_ids: Sequence[ResourceId],
        events: "queue.Queue[SupervisorEvent]",
        interval: float = 0.1,
    ):
        super().__init__(name="turnstile-release-monitor", daemon=True)
        self.ctx = ctx
        self.events = events
        self.interval = interval
        self.tracked: List[ResourceId] = list(resource_ids)
        self._halt = threading.Event()

    def stop(self) -> None:
        """Asks the monitor to finish after its current check."""
        self._halt.set()

    @property
    def _should_stop(self) -> bool:
        return self._halt.is_set() or self.ctx.cancel.cancelled

    def _sweep(self) -> None:
        for rid in list(self.tracked):
            if self._should_stop:
                return
            if self.ctx.backend.usage_exceeds_placeholder(rid):
                self.tracked.remove(rid)
                self.ctx.logger.debug(f"Device {rid} taken over by the command")
                self.events.put(ResourceUsed(rid))

    def run(self) -> None:
        try:
            while self.tracked and not self._should_stop:
                self._sweep()
                if self.tracked:
                    self._halt.wait(self.interval)
        except Exception as e:
            self.events.put(MonitorFailed(e))
            return
        self.events.put(MonitorClosed())
