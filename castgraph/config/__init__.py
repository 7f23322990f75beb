"""Configuration module -- exports Settings and the YAML/env config loader."""

from castgraph.config.loader import load_config, settings_from_config
from castgraph.config.settings import Settings

__all__ = ["Settings", "load_config", "settings_from_config"]
