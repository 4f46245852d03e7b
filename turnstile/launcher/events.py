"""
Supervisor Event Types.

The release monitor and the child-wait notifier both post to one queue;
events from one producer arrive in order, with no ordering across
producers.
"""

from dataclasses import dataclass
from typing import Union

from ..backends.base import ResourceId


@dataclass(frozen=True)
class ResourceUsed:
    """Real work has started on a held device."""

    resource_id: ResourceId


@dataclass(frozen=True)
class MonitorClosed:
    """The release monitor has nothing left to track and stopped."""


@dataclass(frozen=True)
class MonitorFailed:
    """The release monitor stopped on an error."""

    error: Exception


@dataclass(frozen=True)
class ChildExited:
    """The launched command terminated."""

    returncode: int


SupervisorEvent = Union[ResourceUsed, MonitorClosed, MonitorFailed, ChildExited]
