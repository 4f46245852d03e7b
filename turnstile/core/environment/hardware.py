"""
Accelerator Environment Helpers.

Small utilities around the process environment seen by the device
backend and by the launched command.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import os
from typing import Iterable, MutableMapping, Optional

# =========================================================================== #
#                              Device Binding                                 #
# =========================================================================== #


def format_device_list(resource_ids: Iterable[int]) -> str:
    """Comma-joined decimal ids, e.g. ``[0, 3]`` -> ``"0,3"``."""
    return ",".join(str(i) for i in resource_ids)


def strip_inherited_binding(
    env_var: str,
    logger: logging.Logger,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Optional[str]:
    """
    Removes a device binding inherited from the parent shell.

    An inherited ``CUDA_VISIBLE_DEVICES`` would hide devices from the
    backend and renumber the ones it reports, so it is dropped before the
    backend initialises.

    Args:
        env_var: Name of the binding variable.
        logger: Logger receiving the warning.
        environ: Environment mapping to edit (default: ``os.environ``).

    Returns:
        The removed value, or None if the variable was not set.
    """
    env = os.environ if environ is None else environ
    previous = env.pop(env_var, None)
    if previous is not None:
        logger.warning(f"{env_var} is already set ({previous!r}), which will be ignored")
    return previous
