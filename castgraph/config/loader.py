"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

  1. config/config.yaml  -- defaults checked into the repo
  2. .env file           -- local overrides (not committed)
  3. environment vars    -- deploy-time values

``load_config`` reads the YAML file, then deep-merges the Settings-derived
values on top, so a YAML default can be overridden per environment.
:func:`settings_from_config` turns the merged dict back into a validated
:class:`Settings` for the factories in :mod:`castgraph.main`.
"""

from pathlib import Path
from typing import Any

import yaml

from castgraph.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge env-based Settings on top.

    Only Settings fields that were explicitly provided through the
    environment or ``.env`` override the YAML; untouched defaults do not.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to merge; built from the environment
                  when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    explicit = settings.model_fields_set

    sections = {
        "tmdb": {
            "api_key": "tmdb_api_key",
            "base_url": "tmdb_base_url",
            "media_type": "tmdb_media_type",
        },
        "fetch": {
            "cast_batch_size": "cast_batch_size",
            "cast_batch_delay_ms": "cast_batch_delay_ms",
            "cast_limit": "cast_limit",
            "credits_batch_size": "credits_batch_size",
            "credits_batch_delay_ms": "credits_batch_delay_ms",
        },
        "display": {
            "hide_voice_performers": "hide_voice_performers",
        },
        "cache": {
            "max_entries": "cache_max_entries",
            "ttl_seconds": "cache_ttl_seconds",
        },
        "status": {
            "ttl_seconds": "status_ttl_seconds",
            "max_sessions": "status_max_sessions",
        },
        "app": {
            "host": "app_host",
            "port": "app_port",
            "env": "app_env",
        },
        "logging": {
            "level": "log_level",
        },
    }

    env_overrides: dict[str, dict[str, Any]] = {}
    for section, keys in sections.items():
        for key, field_name in keys.items():
            if field_name in explicit:
                env_overrides.setdefault(section, {})[key] = getattr(settings, field_name)

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def settings_from_config(config: dict) -> Settings:
    """Flatten a merged config dict back into a validated Settings."""
    flat: dict[str, Any] = {}
    prefixes = {
        "tmdb": "tmdb_",
        "cache": "cache_",
        "status": "status_",
        "app": "app_",
    }
    for section, values in config.items():
        if not isinstance(values, dict):
            continue
        for key, value in values.items():
            if section == "logging" and key == "level":
                flat["log_level"] = value
            elif section in prefixes:
                flat[f"{prefixes[section]}{key}"] = value
            else:
                flat[key] = value
    return Settings(**flat)


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
