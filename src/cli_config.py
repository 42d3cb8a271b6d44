"""Configuration sources for the CLI.

Loads the optional YAML configuration file and turns parsed arguments into
the ``AcquisitionConfig`` the core consumes. Precedence is CLI, then
environment, then the file, then built-in defaults.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml

from acquisition.config import AcquisitionConfig
from common.platform import PlatformInfo

logger = logging.getLogger(__name__)

_FILE_KEYS = (
    "tool_cache_dir",
    "temp_dir",
    "github_token",
    "gds_token",
    "user_agent",
    "request_timeout",
    "download_timeout",
    "check_for_updates",
    "retry",
)


class ConfigError(Exception):
    """The configuration file cannot be used."""


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load the ``setup_graalvm`` section of a YAML configuration file.

    A top-level mapping without that section is used as is. Unknown keys are
    ignored with a warning.

    Raises:
        ConfigError: If the file is missing or not a YAML mapping.
    """
    if not path:
        return {}
    if not os.path.isfile(path):
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    section = data.get("setup_graalvm", data)
    if not isinstance(section, dict):
        raise ConfigError(f"'setup_graalvm' in {path} must be a mapping")
    unknown = sorted(set(section) - set(_FILE_KEYS))
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
    return {key: value for key, value in section.items() if key in _FILE_KEYS}


def cli_overrides(args) -> Dict[str, Any]:
    """Extract configuration values given on the command line."""
    return {
        "tool_cache_dir": getattr(args, "TOOL_CACHE", None),
        "temp_dir": getattr(args, "TEMP_DIR", None),
        "github_token": getattr(args, "GITHUB_TOKEN", None),
        "gds_token": getattr(args, "GDS_TOKEN", None),
        # store_false flag: only an explicit opt-out overrides lower layers
        "check_for_updates": False if getattr(args, "CHECK_FOR_UPDATES", True) is False else None,
    }


def build_config(
    args,
    env: Optional[Mapping[str, str]] = None,
    platform: Optional[PlatformInfo] = None,
) -> AcquisitionConfig:
    """Build the acquisition configuration for parsed CLI ``args``."""
    file_config = load_config_file(getattr(args, "CONFIG", None))
    return AcquisitionConfig.from_sources(
        cli=cli_overrides(args),
        env=env,
        file_config=file_config,
        platform=platform,
    )
