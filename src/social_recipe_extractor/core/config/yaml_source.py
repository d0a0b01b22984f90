"""Custom YAML settings source with environment-based file merging."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic_settings import PydanticBaseSettingsSource


if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


CONFIG_DIR_ENV_VAR = "SOCIAL_RECIPE_CONFIG_DIR"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge override into base dict.

    Args:
        base: Base dictionary to merge into.
        override: Dictionary with values to override.

    Returns:
        New dictionary with merged values.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_directory(directory: Path) -> dict[str, Any]:
    """Load and deep-merge every ``*.yaml`` file in a directory, sorted by name.

    Args:
        directory: Directory to scan. Missing directories yield an empty dict.

    Returns:
        Merged configuration data.
    """
    merged: dict[str, Any] = {}
    if not directory.exists():
        return merged

    for yaml_file in sorted(directory.glob("*.yaml")):
        with yaml_file.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
            merged = deep_merge(merged, data)
    return merged


class MultiYamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load and merge multiple YAML files based on APP_ENV.

    Configuration is loaded in two stages:
    1. All base YAML files from config/base/
    2. Environment-specific overrides from config/environments/{APP_ENV}/

    The config directory defaults to ``<project root>/config`` and can be
    relocated with the SOCIAL_RECIPE_CONFIG_DIR environment variable.
    """

    def __init__(self, settings_cls: type[Any]) -> None:
        """Initialize the YAML settings source.

        Args:
            settings_cls: The settings class to load configuration for.
        """
        super().__init__(settings_cls)
        self._config_dir = self._find_config_dir()
        self._app_env = os.getenv("APP_ENV", "development")
        self._yaml_data = deep_merge(
            load_yaml_directory(self._config_dir / "base"),
            load_yaml_directory(self._config_dir / "environments" / self._app_env),
        )

    def _find_config_dir(self) -> Path:
        """Find the config directory.

        Returns:
            Path to the config directory.
        """
        override = os.getenv(CONFIG_DIR_ENV_VAR)
        if override:
            return Path(override)

        # src/social_recipe_extractor/core/config/yaml_source.py -> project root
        project_root = Path(__file__).resolve().parents[4]
        return project_root / "config"

    def get_field_value(
        self,
        _field: FieldInfo,
        field_name: str,
    ) -> tuple[Any, str, bool]:
        """Get the value for a specific field from YAML data.

        Returns:
            Tuple of (value, field_name, is_complex).
        """
        value = self._yaml_data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, Any]:
        """Return all merged YAML configuration data."""
        return self._yaml_data
