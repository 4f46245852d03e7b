"""
Pipeline Package.

Phase functions run inside a RootOrchestrator: admission first, then
launch and supervision of the command.
"""

from .phases import run_admission_phase, run_launch_phase

__all__ = [
    "run_admission_phase",
    "run_launch_phase",
]
