"""
Configuration for gitopskit.

Settings are layered from defaults, an optional YAML file, the environment
and explicit overrides.
"""

from gitopskit.config.settings import (
    Settings,
    load_settings,
    load_yaml_config,
    parse_bool,
)

__all__ = ["Settings", "load_settings", "load_yaml_config", "parse_bool"]
