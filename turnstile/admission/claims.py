"""
Claim Sets.

A ClaimSet is the fixed group of devices granted to one run, together
with the placeholder holds still alive on them. Membership never changes
after creation; holds only ever go away, each at most once.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import threading
from typing import TYPE_CHECKING, Dict, Iterator, Mapping, Sequence, Tuple

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from ..backends.base import ResourceHold, ResourceId
from ..core.environment import format_device_list
from ..core.paths import LOGGER_NAME

if TYPE_CHECKING:  # pragma: no cover
    from ..backends.base import ResourceBackend

logger = logging.getLogger(LOGGER_NAME)


class ClaimSet:
    """
    Devices claimed by this run and their live placeholder holds.

    The supervisor is the only writer during a run; the mutex makes
    teardown from another path (error, cancellation) safe as well.

    Attributes:
        resource_ids (Tuple[int, ...]): Claimed devices, ascending.
    """

    def __init__(
        self,
        resource_ids: Sequence[ResourceId],
        holds: Mapping[ResourceId, ResourceHold],
        backend: "ResourceBackend",
    ):
        if set(holds) != set(resource_ids):
            raise ValueError("Every claimed device needs exactly one hold")
        self.resource_ids: Tuple[ResourceId, ...] = tuple(resource_ids)
        self._holds: Dict[ResourceId, ResourceHold] = dict(holds)
        self._backend = backend
        self._mutex = threading.Lock()

    @property
    def device_list(self) -> str:
        """Comma-joined ids used for substitution and the env binding."""
        return format_device_list(self.resource_ids)

    @property
    def live_ids(self) -> Tuple[ResourceId, ...]:
        """Devices whose placeholder is still held."""
        with self._mutex:
            return tuple(rid for rid in self.resource_ids if rid in self._holds)

    def is_held(self, resource_id: ResourceId) -> bool:
        with self._mutex:
            return resource_id in self._holds

    def release(self, resource_id: ResourceId) -> bool:
        """
        Drops the hold on one device.

        Returns:
            True if a hold was dropped, False if it was already gone.
        """
        with self._mutex:
            hold = self._holds.pop(resource_id, None)
        if hold is None:
            return False

        try:
            self._backend.release(hold)
        except Exception as e:
            logger.warning(f"Failed to release hold on device {resource_id}: {e}")
        hold.released = True
        logger.debug(f"Released placeholder on device {resource_id}")
        return True

    def release_all(self) -> int:
        """Drops every remaining hold; returns how many were dropped."""
        return sum(self.release(rid) for rid in self.resource_ids)

    def __len__(self) -> int:
        return len(self.resource_ids)

    def __iter__(self) -> Iterator[ResourceId]:
        return iter(self.resource_ids)

    def __repr__(self) -> str:
        return f"ClaimSet(ids={list(self.resource_ids)}, live={list(self.live_ids)})"

    def __enter__(self) -> "ClaimSet":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release_all()
