"""YAML settings source layering base and per-environment config files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic_settings import PydanticBaseSettingsSource


if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


# src/recipe_engagement/core/config/yaml_source.py -> <project root>/config
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[4] / "config"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``base`` with ``override`` merged in, recursing into dicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_yaml_config(config_dir: Path, app_env: str) -> dict[str, Any]:
    """Load ``base/*.yaml`` then overlay ``environments/<app_env>/*.yaml``.

    Files inside each directory are applied in sorted order. Missing
    directories are skipped.
    """
    merged: dict[str, Any] = {}
    for directory in (config_dir / "base", config_dir / "environments" / app_env):
        if not directory.is_dir():
            continue
        for yaml_file in sorted(directory.glob("*.yaml")):
            with yaml_file.open(encoding="utf-8") as f:
                merged = deep_merge(merged, yaml.safe_load(f) or {})
    return merged


class MultiYamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the merged YAML tree.

    ``APP_ENV`` selects the environment overlay and ``CONFIG_DIR`` can point
    at a config directory other than the one in the project root.
    """

    def __init__(self, settings_cls: type[Any]) -> None:
        super().__init__(settings_cls)
        config_dir = Path(os.getenv("CONFIG_DIR", str(DEFAULT_CONFIG_DIR)))
        self._yaml_data = load_yaml_config(
            config_dir, os.getenv("APP_ENV", "development")
        )

    def get_field_value(
        self,
        _field: FieldInfo,
        field_name: str,
    ) -> tuple[Any, str, bool]:
        value = self._yaml_data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, Any]:
        return self._yaml_data
