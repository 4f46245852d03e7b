"""
Pipeline Phase Functions.

Reusable functions for each phase of a run, designed to work with a
shared RootOrchestrator for context, lock and teardown.

Phases:
    1. Admission: wait for enough idle devices and claim them
    2. Launch: run the command on the claimed devices and supervise it
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from ..admission import AdmissionScheduler, ClaimSet
from ..core.paths import LOGGER_NAME
from ..launcher import ChildOutcome, CommandSupervisor

if TYPE_CHECKING:  # pragma: no cover
    from ..core import RootOrchestrator

logger = logging.getLogger(LOGGER_NAME)


def run_admission_phase(orchestrator: RootOrchestrator) -> Optional[ClaimSet]:
    """
    Waits for idle devices and claims them.

    The claim is recorded on the orchestrator so its holds are released
    on exit even if the launch phase never runs.

    Args:
        orchestrator: Active RootOrchestrator providing context and lock

    Returns:
        The ClaimSet, or None if the run was cancelled while waiting

    Example:
        >>> with RootOrchestrator(cfg) as orch:
        ...     claim = run_admission_phase(orch)
    """
    cfg = orchestrator.cfg
    ctx = orchestrator.ctx
    run_logger = orchestrator.run_logger

    # Type guards for MyPy
    assert ctx is not None, "RunContext not initialized"
    assert run_logger is not None, "Logger not initialized"

    run_logger.info(f"Start waiting at {datetime.now().strftime('%H:%M:%S')}")
    waiting_at = orchestrator.time_tracker.mark("waiting")

    progress = orchestrator.get_progress()
    scheduler = AdmissionScheduler(
        ctx,
        orchestrator.get_lock(),
        requested=cfg.scheduler.num_resources,
        poll_interval=cfg.scheduler.poll_interval,
        progress=progress,
    )
    try:
        claim = scheduler.run()
    finally:
        progress.close()

    if claim is None:
        return None

    orchestrator.claim = claim
    waited = orchestrator.time_tracker.mark("claimed") - waiting_at
    orchestrator.reporter.log_claim(run_logger, claim, waited)
    return claim


def run_launch_phase(orchestrator: RootOrchestrator, claim: ClaimSet) -> Optional[ChildOutcome]:
    """
    Runs the command on the claimed devices and supervises it.

    Args:
        orchestrator: Active RootOrchestrator providing context and command
        claim: Devices granted by the admission phase

    Returns:
        The ChildOutcome, or None if the run was cancelled before the
        command exited
    """
    cfg = orchestrator.cfg
    ctx = orchestrator.ctx
    template = orchestrator.template

    assert ctx is not None, "RunContext not initialized"
    assert template is not None, "Command not validated"

    supervisor = CommandSupervisor(
        ctx,
        template,
        claim,
        env_var=cfg.launch.env_var,
        force_env=cfg.launch.force_env,
        monitor_interval=cfg.launch.monitor_interval,
        poll_interval=cfg.scheduler.poll_interval,
    )
    return supervisor.run()
