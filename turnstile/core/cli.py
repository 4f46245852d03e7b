"""
Argument Parsing Module.

Handles the command-line interface of turnstile. Options that can also
come from a YAML file default to None so ``Config.from_args`` can tell an
explicit flag from an omitted one.
"""

import argparse
from typing import Optional, Sequence

from .config.types import LogLevel
from .. import __version__


# ARGUMENT PARSING
def build_parser() -> argparse.ArgumentParser:
    """Builds the turnstile argument parser."""
    parser = argparse.ArgumentParser(
        prog="turnstile",
        description=(
            "Wait until enough GPUs are idle, claim them atomically across every "
            "turnstile instance on this host, then run COMMAND on them. "
            "'{}' in COMMAND is replaced with the comma-separated GPU ids; "
            "use '{{' and '}}' for literal braces."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # ===== Admission =====
    adm_group = parser.add_argument_group("Admission")

    adm_group.add_argument(
        "-n",
        "--num",
        type=int,
        default=None,
        help="Number of GPUs to wait for (default: 1)",
    )
    adm_group.add_argument(
        "--poll-interval",
        type=float,
        dest="poll_interval",
        default=None,
        help="Seconds between idle checks (default: 1.0)",
    )
    adm_group.add_argument(
        "--lock-name",
        type=str,
        dest="lock_name",
        default=None,
        help="Lock file name shared by cooperating instances (default: gpu-waiter.lock)",
    )
    adm_group.add_argument(
        "--runtime-dir",
        type=str,
        dest="runtime_dir",
        default=None,
        help="Directory holding the lock file (default: platform runtime directory)",
    )

    # ===== Launch =====
    launch_group = parser.add_argument_group("Launch")

    launch_group.add_argument(
        "-f",
        "--force-env",
        action="store_true",
        dest="force_env",
        default=None,
        help="Set the device variable even when COMMAND contains '{}'",
    )
    launch_group.add_argument(
        "--env-var",
        type=str,
        dest="env_var",
        default=None,
        help="Variable receiving the claimed ids (default: CUDA_VISIBLE_DEVICES)",
    )
    launch_group.add_argument(
        "--monitor-interval",
        type=float,
        dest="monitor_interval",
        default=None,
        help="Seconds between takeover checks on claimed GPUs (default: 0.1)",
    )

    # ===== Configuration & Logging =====
    cfg_group = parser.add_argument_group("Configuration & Logging")

    cfg_group.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file with scheduler/launch/telemetry sections; flags override it",
    )
    cfg_group.add_argument(
        "--log-level",
        type=str.upper,
        dest="log_level",
        choices=list(LogLevel.__args__),
        default=None,
        help="Console and file log level (default: INFO)",
    )
    cfg_group.add_argument(
        "--log-dir",
        type=str,
        dest="log_dir",
        default=None,
        help="Also write a rotating log file and the effective config here",
    )
    cfg_group.add_argument(
        "--no-progress",
        action="store_false",
        dest="show_progress",
        default=None,
        help="Disable the waiting spinner",
    )

    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to run once GPUs are claimed",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments.

    Args:
        argv: Arguments without the program name (default: ``sys.argv[1:]``).

    Returns:
        Parsed arguments namespace
    """
    return build_parser().parse_args(argv)
