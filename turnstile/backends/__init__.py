"""
Device Backends.

``ResourceBackend`` is the contract consumed by the admission scheduler
and the release monitor; ``NvidiaBackend`` is the production
implementation.
"""

from .base import ResourceBackend, ResourceHold, ResourceId


def get_default_backend() -> ResourceBackend:
    """Builds the production backend; imports torch only when called."""
    from .nvidia import NvidiaBackend

    return NvidiaBackend()


__all__ = [
    "ResourceBackend",
    "ResourceHold",
    "ResourceId",
    "get_default_backend",
]
