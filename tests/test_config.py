"""Tests for configuration loading."""

import json
from datetime import date
from pathlib import Path

import pytest

from bullet_journal.config import (
    JournalConfig,
    default_data_dir,
    dict_to_config,
    find_config_file,
    load_config,
    load_json_config,
)


class TestDefaultDataDir:
    """Tests for default_data_dir."""

    def test_explicit_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BJ_DATA_DIR", str(tmp_path / "bj"))

        assert default_data_dir() == tmp_path / "bj"

    def test_xdg_data_home(self, monkeypatch, tmp_path):
        monkeypatch.delenv("BJ_DATA_DIR", raising=False)
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

        assert default_data_dir() == tmp_path / "bullet_journal"

    def test_home_fallback(self, monkeypatch):
        monkeypatch.delenv("BJ_DATA_DIR", raising=False)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)

        assert default_data_dir() == Path.home() / ".local" / "share" / "bullet_journal"


class TestJournalConfig:
    """Tests for JournalConfig paths."""

    def test_day_path(self, temp_data_dir):
        config = JournalConfig(data_dir=temp_data_dir)

        assert config.get_day_path(date(2025, 11, 4)) == temp_data_dir / "2025-11-04.md"

    def test_custom_suffix(self, temp_data_dir):
        config = JournalConfig(data_dir=temp_data_dir, file_suffix=".txt")

        assert config.get_day_path(date(2025, 11, 4)).name == "2025-11-04.txt"

    def test_dedup_path(self, temp_data_dir):
        config = JournalConfig(data_dir=temp_data_dir)

        assert config.get_dedup_path() == temp_data_dir / "notified.meetings"

    def test_defaults(self, temp_data_dir):
        config = JournalConfig(data_dir=temp_data_dir)

        assert config.notify_window == 15
        assert config.default_meeting_duration == 60
        assert config.locking is False


class TestFindConfigFile:
    """Tests for find_config_file."""

    def test_none(self, temp_data_dir):
        assert find_config_file(temp_data_dir) is None

    def test_toml_before_json(self, temp_data_dir):
        (temp_data_dir / "bj.toml").write_text("")
        (temp_data_dir / "bj.json").write_text("{}")

        assert find_config_file(temp_data_dir).name == "bj.toml"

    def test_dotfile(self, temp_data_dir):
        (temp_data_dir / ".bj.json").write_text("{}")

        assert find_config_file(temp_data_dir).name == ".bj.json"


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, temp_data_dir):
        config = load_config(temp_data_dir)

        assert config.data_dir == temp_data_dir
        assert config.file_suffix == ".md"

    def test_toml(self, temp_data_dir):
        (temp_data_dir / "bj.toml").write_text(
            '[storage]\n'
            'suffix = ".txt"\n'
            'dedup_file = "sent.keys"\n'
            'locking = true\n'
            'lock_timeout = 2.5\n'
            '\n'
            '[meetings]\n'
            'notify_window = 5\n'
            'default_duration = 25\n'
        )

        config = load_config(temp_data_dir)

        assert config.file_suffix == ".txt"
        assert config.dedup_file == "sent.keys"
        assert config.locking is True
        assert config.lock_timeout == 2.5
        assert config.notify_window == 5
        assert config.default_meeting_duration == 25

    def test_json(self, temp_data_dir):
        (temp_data_dir / "bj.json").write_text(json.dumps({"meetings": {"notify_window": 45}}))

        config = load_config(temp_data_dir)

        assert config.notify_window == 45
        assert config.default_meeting_duration == 60

    def test_explicit_path(self, temp_data_dir, tmp_path):
        explicit = tmp_path / "elsewhere.json"
        explicit.write_text(json.dumps({"storage": {"locking": True}}))

        config = load_config(temp_data_dir, explicit)

        assert config.locking is True
        assert config.data_dir == temp_data_dir

    def test_unsupported_suffix(self, temp_data_dir):
        bad = temp_data_dir / "bj.yaml"
        bad.write_text("")

        with pytest.raises(ValueError, match="Unsupported"):
            load_config(temp_data_dir, bad)

    def test_env_data_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BJ_DATA_DIR", str(tmp_path))

        assert load_config().data_dir == tmp_path

    def test_load_json_config(self, temp_data_dir):
        path = temp_data_dir / "c.json"
        path.write_text('{"storage": {}}')

        assert load_json_config(path) == {"storage": {}}

    def test_dict_to_config_ignores_unknown(self, temp_data_dir):
        config = dict_to_config({"other": {"x": 1}}, temp_data_dir)

        assert config == JournalConfig(data_dir=temp_data_dir)
