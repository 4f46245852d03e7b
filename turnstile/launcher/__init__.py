"""
Command Launch Package.

Template expansion of the command line, supervision of the launched
command and release of placeholder holds once the command takes over.
"""

from .events import ChildExited, MonitorClosed, MonitorFailed, ResourceUsed, SupervisorEvent
from .monitor import ReleaseMonitor
from .supervisor import ChildOutcome, CommandSupervisor, LaunchPlan
from .template import CommandTemplate, TemplateResult, as_text, expand_template

__all__ = [
    # Template
    "CommandTemplate",
    "TemplateResult",
    "expand_template",
    "as_text",
    # Supervision
    "CommandSupervisor",
    "ChildOutcome",
    "LaunchPlan",
    "ReleaseMonitor",
    # Events
    "SupervisorEvent",
    "ResourceUsed",
    "MonitorClosed",
    "MonitorFailed",
    "ChildExited",
]
