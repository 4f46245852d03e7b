"""
Run Reporting Engine.

Formats the startup banner, the claim summary and the final outcome for
RootOrchestrator, so the orchestration code stays free of presentation.
"""

# =========================================================================== #
#                              STANDARD LIBRARY                               #
# =========================================================================== #
import logging
from typing import TYPE_CHECKING, Optional, Protocol

# =========================================================================== #
#                           THIRD-PARTY IMPORTS                               #
# =========================================================================== #
from pydantic import BaseModel, ConfigDict

# =========================================================================== #
#                            INTERNAL IMPORTS                                 #
# =========================================================================== #
from .styles import LogStyle
from ..environment.timing import format_duration

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Config
    from ...admission.claims import ClaimSet
    from ...launcher.supervisor import ChildOutcome


class ReporterProtocol(Protocol):
    """Structural contract for run reporters."""

    def log_startup(
        self, logger_instance: logging.Logger, cfg: "Config", device_count: int
    ) -> None:
        ...  # pragma: no cover

    def log_claim(
        self, logger_instance: logging.Logger, claim: "ClaimSet", waited_seconds: float
    ) -> None:
        ...  # pragma: no cover

    def log_outcome(
        self,
        logger_instance: logging.Logger,
        outcome: Optional["ChildOutcome"],
        elapsed_seconds: float,
    ) -> None:
        ...  # pragma: no cover


class Reporter(BaseModel):
    """
    Centralized formatting of run lifecycle events.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    def log_startup(
        self, logger_instance: logging.Logger, cfg: "Config", device_count: int
    ) -> None:
        """
        Logs the admission request before waiting starts.

        Args:
            logger_instance: Active run logger
            cfg: Validated run configuration
            device_count: Devices present on the host
        """
        ind, arrow = LogStyle.INDENT, LogStyle.ARROW
        logger_instance.info(LogStyle.HEAVY)
        logger_instance.info(f"{ind}{arrow} {'Requested':<14}: {cfg.scheduler.num_resources} of {device_count} device(s)")
        logger_instance.info(f"{ind}{arrow} {'Lock file':<14}: {cfg.scheduler.lock_file_path}")
        logger_instance.info(f"{ind}{arrow} {'Poll interval':<14}: {cfg.scheduler.poll_interval:g}s")
        logger_instance.info(f"{ind}{arrow} {'Command':<14}: {' '.join(cfg.launch.command)}")
        logger_instance.info(LogStyle.HEAVY)

    def log_claim(
        self, logger_instance: logging.Logger, claim: "ClaimSet", waited_seconds: float
    ) -> None:
        logger_instance.info(
            f"{LogStyle.SUCCESS} GPUs occupied: {list(claim.resource_ids)} "
            f"(waited {format_duration(waited_seconds)})"
        )

    def log_outcome(
        self,
        logger_instance: logging.Logger,
        outcome: Optional["ChildOutcome"],
        elapsed_seconds: float,
    ) -> None:
        """Logs how the run ended and its total wall time."""
        logger_instance.info(LogStyle.LIGHT)
        if outcome is None:
            logger_instance.info(f"{LogStyle.WARNING} Run cancelled after {format_duration(elapsed_seconds)}")
        elif outcome.signal is not None:
            logger_instance.info(
                f"{LogStyle.WARNING} Command killed by signal {outcome.signal} "
                f"after {format_duration(elapsed_seconds)}"
            )
        else:
            logger_instance.info(
                f"{LogStyle.ARROW} Command exited with status {outcome.returncode} "
                f"after {format_duration(elapsed_seconds)}"
            )
