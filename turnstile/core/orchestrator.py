"""
Run Lifecycle Orchestration.

This module provides RootOrchestrator, the central coordinator of one
turnstile run. It prepares everything the admission and launch phases
need, and guarantees teardown (holds, lock, signal handler, file log)
however the run ends.

Architecture:
    - Dependency Injection: backend, lock, progress, reporter, timer and
      signal installer are injectable for testability
    - 6-Phase Initialization: logging, environment sanitizing, interrupt
      routing, backend validation, command validation, config persistence
    - Context Manager: automatic acquisition and cleanup

Related Protocols (defined in their respective modules):
    ResourceBackend: backends/base.py
    ReporterProtocol: logger/reporter.py
    ProgressSinkProtocol: logger/progress.py
    TimeTrackerProtocol: environment/timing.py

Typical Usage:
    >>> from turnstile.core import Config, RootOrchestrator, parse_args
    >>> cfg = Config.from_args(parse_args())
    >>> with RootOrchestrator(cfg) as orchestrator:
    ...     claim = run_admission_phase(orchestrator)
    ...     outcome = run_launch_phase(orchestrator, claim)
"""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Literal, MutableMapping, Optional, TypeVar

from .context import CancellationToken, RunContext, install_interrupt_handler
from .environment import FileRWLock, strip_inherited_binding
from .environment.timing import TimeTracker, TimeTrackerProtocol
from .errors import ResourceRequestError
from .io import save_config_as_yaml
from .logger import Logger, NullProgress, Reporter, WaitProgress
from .logger.progress import ProgressSinkProtocol
from .logger.reporter import ReporterProtocol
from .paths import LOGGER_NAME
from ..backends import get_default_backend
from ..launcher.template import CommandTemplate

if TYPE_CHECKING:  # pragma: no cover
    from .config.manifest import Config
    from ..admission.claims import ClaimSet
    from ..backends.base import ResourceBackend

logger = logging.getLogger(LOGGER_NAME)

T = TypeVar("T")

CONFIG_FILE_NAME = "turnstile_config.yaml"


def _resolve(value: Optional[T], default_factory: Callable[[], T]) -> T:
    """
    Resolve optional dependency with lazy default instantiation.

    Args:
        value: Caller-supplied dependency, or None to use the default.
        default_factory: Zero-argument callable producing the default.

    Returns:
        The provided value, or a fresh default.
    """
    return value if value is not None else default_factory()


# ROOT ORCHESTRATOR
class RootOrchestrator:
    """
    Central coordinator for one wait-claim-launch run.

    Initialization Phases:
        1. Logging Initialization: console plus optional rotating file log
        2. Environment Sanitizing: drop an inherited device binding before
           the backend initialises
        3. Interrupt Routing: Ctrl+C sets the CancellationToken
        4. Backend Validation: the request must fit the host's device count
        5. Command Validation: every argument is template-checked before
           any device is touched
        6. Config Persistence: effective config mirrored next to the log

    Dependency Injection:
        - backend_factory: builds the device backend
        - lock_factory: builds the host-wide lock from (name, runtime_dir)
        - progress: waiting status sink
        - reporter: startup/claim/outcome reporting
        - time_tracker: run timer
        - log_initializer: logging setup strategy
        - interrupt_installer: SIGINT routing, returns a restore callable
        - config_saver: YAML persistence function
        - environ: environment mapping sanitized in phase 2

    Attributes:
        cfg (Config): Validated run configuration
        cancel (CancellationToken): Run-wide cancellation flag
        ctx (Optional[RunContext]): Backend, cancellation and logger, after phase 4
        template (Optional[CommandTemplate]): Validated command, after phase 5
        claim (Optional[ClaimSet]): Devices granted by admission; released on exit
        device_count (int): Devices present on the host
        run_logger (Optional[logging.Logger]): Active logger for the session

    Example:
        >>> with RootOrchestrator(cfg) as orch:
        ...     claim = run_admission_phase(orch)
    """

    def __init__(
        self,
        cfg: "Config",
        backend_factory: Optional[Callable[[], "ResourceBackend"]] = None,
        lock_factory: Optional[Callable[..., FileRWLock]] = None,
        progress: Optional[ProgressSinkProtocol] = None,
        reporter: Optional[ReporterProtocol] = None,
        time_tracker: Optional[TimeTrackerProtocol] = None,
        log_initializer: Optional[Callable] = None,
        interrupt_installer: Optional[Callable] = None,
        config_saver: Optional[Callable] = None,
        environ: Optional[MutableMapping[str, str]] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> None:
        self.cfg = cfg

        self.reporter = _resolve(reporter, Reporter)
        self.time_tracker = _resolve(time_tracker, TimeTracker)
        self.cancel = _resolve(cancel, CancellationToken)
        self._backend_factory = backend_factory or get_default_backend
        self._lock_factory = lock_factory or FileRWLock
        self._progress = progress
        self._log_initializer = log_initializer or Logger.setup
        self._interrupt_installer = interrupt_installer or install_interrupt_handler
        self._config_saver = config_saver or save_config_as_yaml
        self._environ = os.environ if environ is None else environ

        # Lazy initialization
        self._initialized: bool = False
        self._restore_interrupt: Optional[Callable[[], None]] = None
        self._lock: Optional[FileRWLock] = None
        self.run_logger: Optional[logging.Logger] = None
        self.ctx: Optional[RunContext] = None
        self.template: Optional[CommandTemplate] = None
        self.claim: Optional["ClaimSet"] = None
        self.device_count: int = 0
        self.config_path: Optional[Path] = None

    def __enter__(self) -> "RootOrchestrator":
        """
        Starts the run timer and runs the initialization phases.

        If any phase raises, cleanup() runs before re-raising so a partial
        setup (signal handler, file log) is undone.
        """
        try:
            self.time_tracker.start()
            self.initialize_core_services()
            return self
        except Exception:
            self.cleanup()
            raise

    def __exit__(self, exc_type, exc_val, exc_tb) -> Literal[False]:
        """Stops the timer and tears everything down; never suppresses."""
        self.time_tracker.stop()
        self.cleanup()
        return False

    # --- Private Lifecycle Phases ---

    def _phase_1_logging_initialization(self) -> None:
        self.run_logger = self._log_initializer(
            name=LOGGER_NAME,
            log_dir=self.cfg.telemetry.log_dir,
            level=self.cfg.telemetry.log_level,
        )
        self.run_logger.debug("Phase 1: Session logging initialized")

    def _phase_2_environment_sanitizing(self) -> None:
        """Drops an inherited binding so the backend sees every device."""
        assert self.run_logger is not None, "Logger must be initialized first"
        self.run_logger.debug("Phase 2: Sanitizing inherited environment")
        strip_inherited_binding(self.cfg.launch.env_var, self.run_logger, self._environ)

    def _phase_3_interrupt_routing(self) -> None:
        assert self.run_logger is not None, "Logger must be initialized first"
        self.run_logger.debug("Phase 3: Routing Ctrl+C to cancellation")
        self._restore_interrupt = self._interrupt_installer(self.cancel, self.run_logger)

    def _phase_4_backend_validation(self) -> None:
        """
        Builds the backend and checks the request can ever be satisfied.

        Raises:
            ResourceRequestError: If more devices are requested than exist.
        """
        assert self.run_logger is not None, "Logger must be initialized first"
        self.run_logger.debug("Phase 4: Initializing device backend")
        backend = self._backend_factory()
        self.device_count = backend.device_count()

        requested = self.cfg.scheduler.num_resources
        if requested > self.device_count:
            raise ResourceRequestError(
                f"Requested {requested} GPU(s) but only {self.device_count} present on this host"
            )
        self.ctx = RunContext(backend=backend, cancel=self.cancel, logger=self.run_logger)

    def _phase_5_command_validation(self) -> None:
        assert self.run_logger is not None, "Logger must be initialized first"
        self.run_logger.debug("Phase 5: Validating command template")
        self.template = CommandTemplate.parse(self.cfg.launch.command)

    def _phase_6_config_persistence(self) -> None:
        """Mirrors the effective configuration next to the session log."""
        log_dir = self.cfg.telemetry.log_dir
        if log_dir is None:
            return
        assert self.run_logger is not None, "Logger must be initialized first"
        self.run_logger.debug("Phase 6: Persisting configuration to YAML")
        self.config_path = self._config_saver(data=self.cfg, yaml_path=log_dir / CONFIG_FILE_NAME)

    def _close_logging_handlers(self) -> None:
        """Closes the file log so it is complete on exit; console output stays."""
        if self.run_logger:
            Logger.close_file_handlers(self.run_logger)

    # --- Public Interface ---

    def initialize_core_services(self) -> RunContext:
        """
        Executes the initialization phases in order.

        Idempotent: a second call returns the existing RunContext.

        Returns:
            RunContext shared by the admission and launch phases
        """
        if self._initialized:
            return self.ctx  # type: ignore[return-value]

        self._phase_1_logging_initialization()
        self._phase_2_environment_sanitizing()
        self._phase_3_interrupt_routing()
        self._phase_4_backend_validation()
        self._phase_5_command_validation()
        self._phase_6_config_persistence()

        assert self.ctx is not None, "RunContext not initialized after phase 4"
        assert self.run_logger is not None
        self.reporter.log_startup(self.run_logger, self.cfg, self.device_count)

        self._initialized = True
        return self.ctx

    def get_lock(self) -> FileRWLock:
        """Opens the host-wide lock on first use."""
        if self._lock is None:
            self._lock = self._lock_factory(
                name=self.cfg.scheduler.lock_name,
                runtime_dir=self.cfg.scheduler.runtime_dir,
            )
        return self._lock

    def get_progress(self) -> ProgressSinkProtocol:
        """Spinner while waiting, or a silent sink when progress is disabled."""
        if self._progress is None:
            if self.cfg.telemetry.show_progress:
                loggers = [self.run_logger] if self.run_logger else None
                self._progress = WaitProgress(loggers=loggers)
            else:
                self._progress = NullProgress()
        return self._progress

    def cleanup(self) -> None:
        """
        Releases every resource acquired during the run.

        Remaining holds go first so other instances can see the devices
        idle as early as possible; the file log closes last.
        """
        cleanup_logger = self.run_logger or logger

        if self.claim is not None:
            self.claim.release_all()

        if self._progress is not None:
            self._progress.close()

        if self._lock is not None:
            try:
                self._lock.close()
            except OSError as e:
                cleanup_logger.error(f"Failed to close lock file: {e}")

        if self._restore_interrupt is not None:
            self._restore_interrupt()
            self._restore_interrupt = None

        self._close_logging_handlers()
