"""
Resource Backend Contract.

A backend enumerates the host's devices, reports which are idle, places a
reversible placeholder hold on a device, releases it, and tells whether
real work has started on a held device.
"""

from dataclasses import dataclass, field
from typing import Any, List, Protocol, Tuple

ResourceId = int


@dataclass(eq=False)
class ResourceHold:
    """
    A placeholder reservation on one device.

    Attributes:
        resource_id: The held device.
        payload: Backend-specific release data (e.g. a placeholder tensor).
        released: Set by the owner once the hold has been dropped.
    """

    resource_id: ResourceId
    payload: Any = field(default=None, repr=False)
    released: bool = False


class ResourceBackend(Protocol):
    """Structural contract for device backends."""

    def device_count(self) -> int:
        """Total devices on the host. Raises BackendError."""
        ...  # pragma: no cover

    def enumerate(self) -> List[Tuple[ResourceId, bool]]:
        """``(id, idle)`` for every device. Raises BackendError."""
        ...  # pragma: no cover

    def hold(self, resource_id: ResourceId) -> ResourceHold:
        """Places a placeholder reservation. Raises BackendError."""
        ...  # pragma: no cover

    def release(self, hold: ResourceHold) -> None:
        """Drops a reservation. Best effort: logs failures, never raises."""
        ...  # pragma: no cover

    def usage_exceeds_placeholder(self, resource_id: ResourceId) -> bool:
        """True once more than the placeholder uses the device. Raises BackendError."""
        ...  # pragma: no cover
