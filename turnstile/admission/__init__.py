"""
Admission Control Package.

Waits for enough idle devices and claims them atomically across every
instance on the host.
"""

from .claims import ClaimSet
from .scheduler import (
    AdmissionOutcome,
    AdmissionScheduler,
    AdmissionState,
    InsufficientResources,
)

__all__ = [
    "ClaimSet",
    "AdmissionScheduler",
    "AdmissionState",
    "AdmissionOutcome",
    "InsufficientResources",
]
