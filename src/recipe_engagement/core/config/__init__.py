"""Settings loaded from ``config/`` YAML, ``.env`` and the environment."""

from .settings import AuthMode, Settings, get_settings, parse_list


__all__ = ["AuthMode", "Settings", "get_settings", "parse_list"]
