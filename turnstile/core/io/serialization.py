"""
Configuration Serialization & Persistence Utilities.

Loads run configuration from YAML and mirrors the effective configuration
next to the session log, so a run can be audited after the fact.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import os
from pathlib import Path
from typing import Any, Dict

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import yaml

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from ..paths import LOGGER_NAME

# =========================================================================== #
#                               YAML Orchestration                            #
# =========================================================================== #


def save_config_as_yaml(data: Any, yaml_path: Path) -> Path:
    """
    Saves a configuration object as a YAML file.

    Args:
        data (Any): The configuration data (Pydantic model or dict).
        yaml_path (Path): The target filesystem path for the YAML file.

    Returns:
        Path: The confirmed path where the configuration was stored.
    """
    logger = logging.getLogger(LOGGER_NAME)
    try:
        raw_dict = data.model_dump(mode="json") if hasattr(data, "model_dump") else data
        _persist_yaml(_sanitize_for_yaml(raw_dict), yaml_path)
        logger.debug(f"Configuration saved at → {yaml_path}")
        return yaml_path

    except Exception as e:
        logger.error(f"Failed to save configuration YAML: {e}")
        raise


def load_config_from_yaml(yaml_path: Path) -> Dict[str, Any]:
    """
    Loads a raw configuration dictionary from a YAML file.

    Args:
        yaml_path (Path): Path to the source YAML file.

    Returns:
        Dict[str, Any]: The loaded configuration manifest.

    Raises:
        FileNotFoundError: If the specified path does not exist.
    """
    if not yaml_path.exists():
        raise FileNotFoundError(f"YAML configuration file not found at: {yaml_path}")

    with open(yaml_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)


# =========================================================================== #
#                               Internal Helpers                              #
# =========================================================================== #

def _sanitize_for_yaml(obj: Any) -> Any:
    """Recursively converts Paths to strings and tuples to lists."""
    if isinstance(obj, dict):
        return {k: _sanitize_for_yaml(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize_for_yaml(i) for i in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj


def _persist_yaml(data: Any, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(
            data,
            f,
            default_flow_style=False,
            sort_keys=False,
            indent=4,
            allow_unicode=True
        )
        f.flush()
        os.fsync(f.fileno())
