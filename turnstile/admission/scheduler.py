"""
Admission Scheduler.

Polls the device backend under the host-wide exclusive lock until enough
devices are idle, then holds the lowest-numbered ones before letting the
lock go. Taking the lock around "enumerate + hold" makes the check and the
reservation one atomic step for every instance on the host; the lock is
never held across the poll sleep so waiting instances do not starve each
other.

States: POLLING -> CLAIMED | CANCELLED, one pass per run.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Tuple, Union

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from .claims import ClaimSet
from ..backends.base import ResourceHold, ResourceId
from ..core.logger import NullProgress, ProgressSinkProtocol

if TYPE_CHECKING:  # pragma: no cover
    from ..core.context import RunContext
    from ..core.environment import FileRWLock


class AdmissionState(Enum):
    POLLING = "polling"
    CLAIMED = "claimed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class InsufficientResources:
    """Normal "keep polling" outcome of one admission attempt."""

    idle: Tuple[ResourceId, ...]
    requested: int

    @property
    def found(self) -> int:
        return len(self.idle)


AdmissionOutcome = Union[ClaimSet, InsufficientResources]


class AdmissionScheduler:
    """
    First-come-first-served admission of one run.

    Args:
        ctx: Run context (backend, cancellation, logger).
        lock: Host-wide lock serializing admission across instances.
        requested: Number of devices to claim.
        poll_interval: Seconds between attempts while waiting.
        progress: Status sink updated after every failed attempt.

    Example:
        >>> scheduler = AdmissionScheduler(ctx, FileRWLock(), requested=2)
        >>> claim = scheduler.run()  # None if cancelled
    """

    def __init__(
        self,
        ctx: "RunContext",
        lock: "FileRWLock",
        requested: int,
        poll_interval: float = 1.0,
        progress: Optional[ProgressSinkProtocol] = None,
    ):
        if requested < 1:
            raise ValueError(f"requested must be positive, got {requested}")
        self.ctx = ctx
        self.lock = lock
        self.requested = requested
        self.poll_interval = poll_interval
        self.progress = progress or NullProgress()
        self.state = AdmissionState.POLLING
        self.attempts = 0

    @property
    def log(self) -> logging.Logger:
        return self.ctx.logger

    def try_claim(self) -> AdmissionOutcome:
        """
        One atomic admission attempt.

        Returns:
            A ClaimSet when enough devices were idle, else
            InsufficientResources.

        Raises:
            BackendError: If enumeration or a hold fails. Holds already
                placed during this attempt are released first.
            LockError: If the host lock cannot be acquired.
        """
        backend = self.ctx.backend
        self.attempts += 1

        with self.lock.acquire_exclusive():
            idle = sorted(rid for rid, is_idle in backend.enumerate() if is_idle)
            if len(idle) < self.requested:
                return InsufficientResources(tuple(idle), self.requested)

            self.log.info(f"Found {self.requested} idle GPUs!: {idle}")
            chosen = idle[:self.requested]
            self.log.info(f"Occupying GPUs: {chosen}")

            holds: Dict[ResourceId, ResourceHold] = {}
            try:
                for rid in chosen:
                    holds[rid] = backend.hold(rid)
            except BaseException:
                for hold in holds.values():
                    backend.release(hold)
                raise

        return ClaimSet(chosen, holds, backend)

    def run(self) -> Optional[ClaimSet]:
        """
        Waits until the request can be admitted or the run is cancelled.

        Returns:
            The ClaimSet, or None when cancelled (not an error).
        """
        if self.state is not AdmissionState.POLLING:
            raise RuntimeError(f"Admission already finished ({self.state.value})")

        while not self.ctx.cancel.cancelled:
            outcome = self.try_claim()
            if isinstance(outcome, ClaimSet):
                self.state = AdmissionState.CLAIMED
                return outcome

            self.progress.update(outcome.found, outcome.requested)
            self.log.debug(
                f"Attempt {self.attempts}: {outcome.found} idle of {outcome.requested} requested"
            )
            if self.ctx.cancel.wait(self.poll_interval):
                break

        self.state = AdmissionState.CANCELLED
        return None
