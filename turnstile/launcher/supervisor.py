"""
Command Supervisor.

Expands the command with the claimed device ids, launches it, and runs a
single control loop over three sources:

    1. release monitor events: drop the hold of a device the command took over
    2. child exit: terminal, the exit status is returned
    3. cancellation: checked every iteration, stops the loop without
       killing the child

Every hold still alive when the loop ends is released, whichever way it
ends.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import os
import queue
import subprocess
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Mapping, Optional, Tuple

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from .events import ChildExited, MonitorClosed, MonitorFailed, ResourceUsed, SupervisorEvent
from .monitor import ReleaseMonitor
from .template import Argument, CommandTemplate
from ..core.errors import ProcessSpawnError
from ..core.paths import DEFAULT_ENV_VAR

if TYPE_CHECKING:  # pragma: no cover
    from ..admission.claims import ClaimSet
    from ..core.context import RunContext


@dataclass(frozen=True)
class ChildOutcome:
    """
    How the launched command ended.

    ``returncode`` follows subprocess conventions: negative values mean the
    child was killed by that signal.
    """

    returncode: int

    @property
    def signal(self) -> Optional[int]:
        return -self.returncode if self.returncode < 0 else None

    @property
    def exit_status(self) -> int:
        """Shell-style status: the return code, or 128 + signal."""
        return 128 + self.signal if self.signal is not None else self.returncode


@dataclass(frozen=True)
class LaunchPlan:
    """
    Everything handed to the OS to start the child.

    Attributes:
        argv: Expanded arguments, program first.
        env: Full child environment.
        binding: ``(name, value)`` of the device binding, or None when the
            ids are placed in the command through ``{}`` instead.
    """

    argv: List[Argument]
    env: Dict[str, str]
    binding: Optional[Tuple[str, str]]


class CommandSupervisor:
    """
    Launches the command bound to a ClaimSet and supervises it.

    Args:
        ctx: Run context (backend, cancellation, logger).
        template: Pre-validated command.
        claim: Devices granted to this run; released on every exit path.
        env_var: Binding variable name.
        force_env: Bind even when the command carries template markers.
        monitor_interval: Release monitor sweep period.
        poll_interval: Upper bound on the loop's reaction time to cancellation.
        base_env: Environment the child inherits (default: ``os.environ``).
        popen: Process factory, ``subprocess.Popen`` compatible.
    """

    def __init__(
        self,
        ctx: "RunContext",
        template: CommandTemplate,
        claim: "ClaimSet",
        env_var: str = DEFAULT_ENV_VAR,
        force_env: bool = False,
        monitor_interval: float = 0.1,
        poll_interval: float = 1.0,
        base_env: Optional[Mapping[str, str]] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        self.ctx = ctx
        self.template = template
        self.claim = claim
        self.env_var = env_var
        self.force_env = force_env
        self.monitor_interval = monitor_interval
        self.poll_interval = poll_interval
        self.base_env = base_env
        self._popen = popen
        self.events: "queue.Queue[SupervisorEvent]" = queue.Queue()
        self.process: Optional[subprocess.Popen] = None

    def plan(self) -> LaunchPlan:
        """Expands the command and decides the environment binding."""
        log = self.ctx.logger
        device_list = self.claim.device_list
        argv = self.template.render(device_list)

        env = dict(os.environ if self.base_env is None else self.base_env)
        binding: Optional[Tuple[str, str]] = None
        if not self.template.uses_template or self.force_env:
            binding = (self.env_var, device_list)
            env[self.env_var] = device_list
        else:
            env.pop(self.env_var, None)
            log.info(f"{self.env_var} is NOT set because the command contains template")

        if self.template.uses_template:
            shown = " ".join(os.fsdecode(a) if isinstance(a, bytes) else a for a in argv)
            log.info(f"The command will be run as: {shown!r}")

        return LaunchPlan(argv=argv, env=env, binding=binding)

    def spawn(self, plan: LaunchPlan) -> subprocess.Popen:
        try:
            self.process = self._popen(plan.argv, env=plan.env)
        except (OSError, ValueError) as e:
            raise ProcessSpawnError(f"Failed to launch {plan.argv[0]!r}: {e}") from e
        self.ctx.logger.debug(f"Launched pid {self.process.pid}")
        return self.process

    def _notify_exit(self, process: subprocess.Popen) -> None:
        self.events.put(ChildExited(process.wait()))

    def run(self) -> Optional[ChildOutcome]:
        """
        Launches the command and supervises it until it exits.

        Returns:
            The ChildOutcome, or None if cancelled before the child exited.

        Raises:
            ProcessSpawnError: If the command could not be launched.
            BackendError: If the release monitor failed.
        """
        monitor = ReleaseMonitor(
            self.ctx, self.claim.live_ids, self.events, interval=self.monitor_interval
        )
        try:
            plan = self.plan()
            monitor.start()
            process = self.spawn(plan)
            threading.Thread(
                target=self._notify_exit,
                args=(process,),
                name="turnstile-child-wait",
                daemon=True,
            ).start()
            return self._loop()
        finally:
            monitor.stop()
            if monitor.is_alive():
                monitor.join(timeout=self.poll_interval)
            released = self.claim.release_all()
            if released:
                self.ctx.logger.debug(f"Released {released} remaining placeholder(s) at teardown")

    def _loop(self) -> Optional[ChildOutcome]:
        log = self.ctx.logger
        monitor_open = True

        while not self.ctx.cancel.cancelled:
            try:
                event = self.events.get(timeout=self.poll_interval)
            except queue.Empty:
                continue

            if isinstance(event, ChildExited):
                outcome = ChildOutcome(event.returncode)
                log.info(f"Process exited with status: {outcome.returncode}")
                return outcome
            if isinstance(event, ResourceUsed):
                if self.claim.release(event.resource_id):
                    log.info(f"GPU {event.resource_id} is in use by the command, placeholder released")
            elif isinstance(event, MonitorClosed):
                if monitor_open:
                    log.debug("Release monitor finished")
                monitor_open = False
            elif isinstance(event, MonitorFailed):
                monitor_open = False
                raise event.error

        log.info("Supervision cancelled; the command keeps running on its own")
        return None
