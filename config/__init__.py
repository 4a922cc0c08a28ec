"""
Config package for Mailbox Access Toolkit

Contains YAML configuration files:
- settings.yaml: Mailbox quota, access right, export filename and encoding
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Path to config directory
CONFIG_DIR = Path(__file__).parent

DEFAULT_SETTINGS_FILE = 'settings.yaml'


def get_config_path(filename: str) -> str:
    """
    Get absolute path to a config file.

    Args:
        filename: Name of config file (e.g., 'settings.yaml')

    Returns:
        Absolute path to the config file
    """
    return str(CONFIG_DIR / filename)


def load_settings(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load toolkit settings, layering an optional override file on the defaults.

    PURPOSE: One place to read the mailbox quota, export filename, etc.

    PARAMETERS:
        path: Optional YAML file whose keys override settings.yaml.
              Keys that settings.yaml doesn't define are ignored.

    RETURNS:
        dict: Merged settings

    RAISES:
        FileNotFoundError: If the override file doesn't exist
    """
    with open(get_config_path(DEFAULT_SETTINGS_FILE), 'r') as f:
        settings = yaml.safe_load(f) or {}

    if path is None:
        return settings

    override_path = Path(path).expanduser()
    if not override_path.exists():
        raise FileNotFoundError(f"Settings file not found: {override_path}")

    with open(override_path, 'r') as f:
        overrides = yaml.safe_load(f) or {}

    for key, value in overrides.items():
        if key in settings:
            settings[key] = value

    return settings
