"""
Turnstile command-line entry point.

Run order:
    1. Admission: wait until enough GPUs are idle and claim them
    2. Launch: run the command bound to the claimed GPUs

Exit status:
    - the command's own exit status
    - 128 + N if the command was killed by signal N
    - 130 if the run was cancelled with Ctrl+C
    - 1 on configuration, lock, backend or launch errors

Usage:
    turnstile -n 2 python train.py
    turnstile -n 2 python train.py --gpus {}
    python -m turnstile --config waiter.yaml -- ./run.sh
"""

import logging
from typing import Optional, Sequence

from turnstile.core import (
    LOGGER_NAME,
    Config,
    LogStyle,
    RootOrchestrator,
    TurnstileError,
    parse_args,
)
from turnstile.pipeline import run_admission_phase, run_launch_phase

EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Parses arguments, runs admission then launch, and exits with the
    status of the run.

    Args:
        argv: Arguments without the program name (default: ``sys.argv[1:]``)

    Raises:
        SystemExit: Always, carrying the run's exit status.
    """
    args = parse_args(argv)
    logger = logging.getLogger(LOGGER_NAME)

    try:
        cfg = Config.from_args(args)
        with RootOrchestrator(cfg) as orchestrator:
            run_logger = orchestrator.run_logger
            outcome = None

            claim = run_admission_phase(orchestrator)
            if claim is not None:
                outcome = run_launch_phase(orchestrator, claim)

            orchestrator.reporter.log_outcome(
                run_logger, outcome, orchestrator.time_tracker.elapsed_seconds
            )
            exit_code = EXIT_CANCELLED if outcome is None else outcome.exit_status

    except TurnstileError as e:
        logger.error(f"{LogStyle.WARNING} {e}")
        raise SystemExit(EXIT_FAILURE)

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
