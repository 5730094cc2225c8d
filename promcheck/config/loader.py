"""
Configuration Loader - Load check groups from YAML
A config file maps group names to check settings, one group per exporter
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from promcheck.config.settings import CheckSettings
from promcheck.errors import ConfigError

logger = logging.getLogger(__name__)


def load_yaml_config(file_path: str) -> Dict[str, Any]:
    """
    Load the group mapping from a YAML file

    Args:
        file_path: Path to YAML file

    Returns:
        Group name to raw group configuration (empty for an empty file)

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        ConfigError: If the document root is not a mapping
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    document = yaml.safe_load(path.read_text(encoding="utf-8"))
    if document is None:
        logger.warning(f"Empty configuration file: {file_path}")
        return {}
    if not isinstance(document, dict):
        raise ConfigError(f"configuration root must be a mapping of groups: {file_path}")

    logger.info(f"Loaded configuration groups {sorted(document)} from {file_path}")
    return document


def merge_configs(*configs: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge group configurations, later ones winning

    Nested mappings merge key by key; lists and scalars are replaced whole,
    so an override of ``metrics`` replaces the file's rule list.

    Args:
        *configs: Configurations in increasing precedence (None entries skipped)

    Returns:
        New merged dictionary; inputs are left untouched
    """
    merged: Dict[str, Any] = {}
    for config in configs:
        for key, value in (config or {}).items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = merge_configs(current, value)
            else:
                merged[key] = value
    return merged


def list_groups(config: Dict[str, Any]) -> List[str]:
    """Names of the entries that are usable check groups"""
    return [name for name, value in config.items() if isinstance(value, dict)]


def load_settings(
    config_path: str,
    group: str = "exporter",
    overrides: Optional[Dict[str, Any]] = None,
) -> CheckSettings:
    """
    Load one check group from a YAML configuration file

    Args:
        config_path: Path to the YAML config file
        group: Top-level key selecting the group to check
        overrides: Values taking precedence over the file and the environment
            (e.g. from CLI flags)

    Returns:
        CheckSettings: Validated, immutable settings for the group

    Raises:
        ConfigError: If the file is missing or invalid, or the group doesn't exist

    Examples:
        >>> settings = load_settings(".promcheck.yaml", group="node-exporter")
    """
    try:
        config = load_yaml_config(config_path)
    except (FileNotFoundError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to load configuration: {e}") from e

    group_config = config.get(group)
    if not isinstance(group_config, dict):
        available = ", ".join(list_groups(config)) or "none"
        raise ConfigError(f"invalid group: {group} (available: {available})")

    try:
        settings = CheckSettings(**group_config)
        if overrides:
            # model_validate skips the settings sources, so the environment cannot win again
            settings = CheckSettings.model_validate(
                merge_configs(settings.model_dump(), overrides)
            )
    except ValidationError as e:
        raise ConfigError(f"invalid configuration for group {group}: {e}") from e

    logger.debug(f"Configuration group {group} loaded successfully")
    return settings
