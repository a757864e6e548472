from __future__ import annotations

"""
Runner Configuration Management.

Provides the default runtime configuration and loads optional overrides from a
JSON file. The resulting dictionary drives group discovery, engine creation
and verification.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from annocheck.domain import constants as const

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    base = os.getcwd()
    return {
        # Discovery
        "groups_dir": os.path.join(base, "groups"),
        "groups": [],
        "case_extensions": [".js"],

        # Analysis Engine
        "engine": "",
        "vendor_dir": os.path.join(base, "vendor"),
        "defs_dir": os.path.join(base, "vendor", "defs"),
        "plugin_dir": os.path.join(base, "vendor", "plugins"),

        # Execution
        "workers": 1,
        "settle_timeout": 60.0,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Merge the defaults with a JSON configuration file, if one exists.

    Args:
        path: Explicit config file. Defaults to 'annocheck.json' in the
              current working directory.

    Returns:
        Dict[str, Any]: Defaults updated with the file's values.
    """
    config = get_default_config()
    target = path or os.path.join(os.getcwd(), const.DEFAULT_CONFIG_FILE)

    if not os.path.exists(target):
        if path:
            logger.warning(f"Config file not found: {target}. Using defaults.")
        else:
            logger.debug("No config file found. Using defaults.")
        return config

    try:
        with open(target, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config '{target}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning(f"Config file '{target}' is not a JSON object. Using defaults.")
        return config

    data.pop("version", None)
    config.update(data)
    logger.debug(f"Configuration loaded from {target}")
    return config
