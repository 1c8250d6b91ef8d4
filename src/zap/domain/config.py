from __future__ import annotations

"""
Configuration Domain Management.

Provides the default session configuration of an embedding run and loads
project-level overrides from a JSON file stored at the project root.
"""

import json
import logging
import os
from typing import Any, Dict

from zap.domain.constants import (
    CONFIG_FILE_NAME,
    CURRENT_CONFIG_VERSION,
    DEFAULT_MAX_WORKERS,
    DEFAULT_RUNTIME_DIR,
    DEFAULT_SKIP_DIRS,
    DEFAULT_SKIP_ENTRIES,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.
    This dictionary drives the behavior of the embedding pipeline.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # IO Paths
        "project_path": os.getcwd(),
        "runtime_dir": DEFAULT_RUNTIME_DIR,

        # Generation Mode
        "development_mode": False,
        "install_runtime": True,

        # Discovery & Collection
        "skip_dirs": list(DEFAULT_SKIP_DIRS),
        "skip_entries": list(DEFAULT_SKIP_ENTRIES),
        "max_workers": DEFAULT_MAX_WORKERS,

        # Diagnostics
        "report_duplicate_keys": True,
    }


def get_config_path(project_path: str) -> str:
    """Location of the project-level configuration file."""
    return os.path.join(project_path, CONFIG_FILE_NAME)


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(project_path: str) -> Dict[str, Any]:
    """
    Load the project configuration, merged over the defaults.

    A missing file is not an error. A corrupted file is reported and
    ignored so a broken config never blocks a build with defaults.

    Args:
        project_path: Root directory of the project being embedded.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    config = get_default_config()
    config["project_path"] = project_path
    config_path = get_config_path(project_path)

    if not os.path.exists(config_path):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config '{config_path}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    data.pop("version", None)
    config.update(data)
    # The file lives inside the project, so the project path is never overridden
    config["project_path"] = project_path
    return config


def save_config(project_path: str, config: Dict[str, Any]) -> bool:
    """
    Persist the provided configuration to the project root.

    Args:
        project_path: Root directory of the project.
        config: The configuration dictionary to save.

    Returns:
        bool: True if the file was written.
    """
    payload = {k: v for k, v in config.items() if k != "project_path"}
    payload["version"] = CURRENT_CONFIG_VERSION
    config_path = get_config_path(project_path)
    try:
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False
    return True
