"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from castgraph.config.loader import load_config, settings_from_config
from castgraph.config.settings import Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for var in ("TMDB_API_KEY", "TMDB_MEDIA_TYPE", "HIDE_VOICE_PERFORMERS", "LOG_LEVEL", "APP_ENV"):
        monkeypatch.delenv(var, raising=False)
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)


def _write_yaml(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.cast_batch_size == 5
        assert settings.cast_batch_delay == pytest.approx(0.1)
        assert settings.credits_batch_size == 3
        assert settings.credits_batch_delay == pytest.approx(0.15)
        assert settings.cast_limit == 25
        assert settings.hide_voice_performers is False

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TMDB_API_KEY", "secret")
        monkeypatch.setenv("HIDE_VOICE_PERFORMERS", "true")
        settings = Settings()
        assert settings.tmdb_api_key == "secret"
        assert settings.hide_voice_performers is True

    def test_bad_media_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(tmdb_media_type="radio")


class TestLoader:
    def test_missing_file_gives_empty_config(self, tmp_path: Path) -> None:
        assert load_config(str(tmp_path / "missing.yaml"), settings=Settings()) == {}

    def test_yaml_values_flow_into_settings(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, {
            "tmdb": {"media_type": "movie"},
            "fetch": {"cast_batch_size": 4, "cast_limit": 10},
            "cache": {"max_entries": 2},
            "status": {"ttl_seconds": 120},
            "app": {"name": "castgraph", "port": 9000},
            "logging": {"level": "DEBUG"},
        })

        settings = settings_from_config(load_config(str(path), settings=Settings()))

        assert settings.tmdb_media_type == "movie"
        assert settings.cast_batch_size == 4
        assert settings.cast_limit == 10
        assert settings.cache_max_entries == 2
        assert settings.status_ttl_seconds == 120
        assert settings.app_port == 9000
        assert settings.log_level == "DEBUG"

    def test_explicit_env_beats_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_yaml(tmp_path, {"tmdb": {"media_type": "movie"}})
        monkeypatch.setenv("TMDB_MEDIA_TYPE", "tv")

        config = load_config(str(path))
        assert config["tmdb"]["media_type"] == "tv"

    def test_untouched_defaults_do_not_override_yaml(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, {"fetch": {"credits_batch_size": 6}})
        config = load_config(str(path), settings=Settings())
        assert config["fetch"]["credits_batch_size"] == 6

    def test_repo_config_is_loadable(self) -> None:
        repo_config = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        settings = settings_from_config(load_config(str(repo_config), settings=Settings()))
        assert settings.cast_batch_size == 5
        assert settings.cache_ttl_seconds == 21600
        assert settings.status_max_sessions == 1024
