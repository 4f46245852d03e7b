"""
Input/Output & Persistence Utilities.

YAML loading for run configuration and persistence of the effective
configuration.
"""

from .serialization import (
    load_config_from_yaml,
    save_config_as_yaml,
)

__all__ = [
    "save_config_as_yaml",
    "load_config_from_yaml",
]
