"""
Tests for the config module.

Tests cover:
- Defaults
- Loading from a JSON settings file
- Environment overrides
- Invalid values
"""

import json

import pytest

from scholarship_search.config import (
    NEVER,
    ConfigError,
    ImporterConfig,
    load_config,
    validate_schedule,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SCHOLARSHIP_SEARCH_CONFIG_PATH",
        "SCHOLARSHIP_KEYWORDS",
        "SCHOLARSHIP_MAX_PAGES",
        "SCHOLARSHIP_CRON_SCHEDULE",
        "DATA_PATH",
        "SUMMARY_PATH",
        "SCHOLARSHIP_INFO_URL",
    ):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path, data):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data))
    return str(path)


class TestValidateSchedule:
    """Tests for schedule names."""

    @pytest.mark.parametrize("name", ["hourly", "twicedaily", "daily", "weekly", "never", " Daily "])
    def test_known(self, name):
        assert validate_schedule(name) == name.strip().lower()

    def test_unknown(self):
        with pytest.raises(ConfigError):
            validate_schedule("every-minute")


class TestLoadConfig:
    """Tests for settings resolution."""

    def test_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.json"))

        assert config == ImporterConfig()
        assert config.cron_schedule == NEVER
        assert config.max_pages == 1

    def test_from_file(self, tmp_path):
        path = _write(tmp_path, {
            "keywords": " machine learning ",
            "max_pages": 3,
            "cron_schedule": "daily",
            "data_path": "/var/lib/scholarships.json",
        })

        config = load_config(path)

        assert config.keywords == "machine learning"
        assert config.max_pages == 3
        assert config.cron_schedule == "daily"
        assert config.data_path == "/var/lib/scholarships.json"

    def test_env_path_takes_priority(self, tmp_path, monkeypatch):
        env_path = _write(tmp_path, {"keywords": "from env file"})
        monkeypatch.setenv("SCHOLARSHIP_SEARCH_CONFIG_PATH", env_path)

        config = load_config(str(tmp_path / "other.json"))

        assert config.keywords == "from env file"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = _write(tmp_path, {"keywords": "file", "max_pages": 2})
        monkeypatch.setenv("SCHOLARSHIP_KEYWORDS", "env keywords")
        monkeypatch.setenv("SCHOLARSHIP_MAX_PAGES", "4")

        config = load_config(path)

        assert config.keywords == "env keywords"
        assert config.max_pages == 4

    def test_max_pages_clamped(self, tmp_path):
        assert load_config(_write(tmp_path, {"max_pages": 10})).max_pages == 5
        assert load_config(_write(tmp_path, {"max_pages": 0})).max_pages == 1

    def test_invalid_values_keep_defaults(self, tmp_path):
        config = load_config(_write(tmp_path, {"max_pages": "lots", "cron_schedule": "minutely"}))

        assert config.max_pages == 1
        assert config.cron_schedule == NEVER

    def test_non_object_file_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]")

        assert load_config(str(path)) == ImporterConfig()

    def test_to_dict(self):
        assert ImporterConfig(keywords="x").to_dict()["keywords"] == "x"
