"""YAML configuration loader with environment variable overrides.

# --- CONFIGURATION HIERARCHY ------------------------------------------
#
# Configuration is layered (later layers override earlier):
#
#   1. Settings field defaults
#   2. config/config.yaml  -- static defaults checked into the repo
#   3. Environment vars    -- set per deployment / shell
#
# Keys in the YAML file use the Settings field names.  A YAML key is
# dropped whenever the matching environment variable is set, so the
# environment always wins.  .env entries apply only to keys the YAML file
# does not set.
# ----------------------------------------------------------------------
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from semantic_news.config.settings import Settings
from semantic_news.utils.errors import ConfigurationError


def load_settings(path: str | Path = "config/config.yaml") -> Settings:
    """Build the one Settings instance for this process.

    Args:
        path: YAML file with Settings field overrides.  Missing file = no overrides.

    Returns:
        Fully resolved Settings.

    Raises:
        ConfigurationError: if the YAML is not a mapping or validation fails.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    if not isinstance(yaml_config, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping of settings")

    overrides = {
        key: value
        for key, value in yaml_config.items()
        if key.upper() not in os.environ
    }

    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
