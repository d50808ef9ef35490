"""Configuration loading for the bullet journal.

Supports two tiers:
1. Built-in defaults, with the data directory taken from the environment
2. A .toml or .json file in the data directory (or given explicitly)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Optional

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Python <3.11
    except ImportError:  # pragma: no cover
        tomllib = None


APP_NAME = "bullet_journal"


def default_data_dir() -> Path:
    """Resolve the data directory from the environment.

    Search order:
    1. $BJ_DATA_DIR
    2. $XDG_DATA_HOME/bullet_journal
    3. ~/.local/share/bullet_journal
    """
    explicit = os.environ.get("BJ_DATA_DIR")
    if explicit:
        return Path(explicit).expanduser()
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg).expanduser() / APP_NAME
    return Path.home() / ".local" / "share" / APP_NAME


@dataclass
class JournalConfig:
    """Configuration for a journal's storage and meeting alerts."""

    data_dir: Path = field(default_factory=default_data_dir)

    # Day files are <data_dir>/YYYY-MM-DD<file_suffix>
    file_suffix: str = ".md"
    dedup_file: str = "notified.meetings"

    # Meetings
    notify_window: int = 15  # minutes
    default_meeting_duration: int = 60  # minutes

    # Off by default: concurrent invocations are last-writer-wins
    locking: bool = False
    lock_timeout: float = 10.0

    def get_day_path(self, day: date) -> Path:
        return self.data_dir / f"{day.strftime('%Y-%m-%d')}{self.file_suffix}"

    def get_dedup_path(self) -> Path:
        return self.data_dir / self.dedup_file


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    if tomllib is None:
        raise ImportError("tomli required for TOML config: pip install tomli")
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def dict_to_config(data: dict[str, Any], data_dir: Path) -> JournalConfig:
    """Convert dictionary to JournalConfig."""
    config = JournalConfig(data_dir=data_dir)

    if "storage" in data:
        storage = data["storage"]
        if "suffix" in storage:
            config.file_suffix = storage["suffix"]
        if "dedup_file" in storage:
            config.dedup_file = storage["dedup_file"]
        if "locking" in storage:
            config.locking = bool(storage["locking"])
        if "lock_timeout" in storage:
            config.lock_timeout = float(storage["lock_timeout"])

    if "meetings" in data:
        meetings = data["meetings"]
        if "notify_window" in meetings:
            config.notify_window = int(meetings["notify_window"])
        if "default_duration" in meetings:
            config.default_meeting_duration = int(meetings["default_duration"])

    return config


def find_config_file(data_dir: Path) -> Optional[Path]:
    """Find configuration file in the data directory.

    Search order:
    1. bj.toml
    2. bj.json
    3. .bj.toml
    4. .bj.json
    """
    candidates = [
        "bj.toml",
        "bj.json",
        ".bj.toml",
        ".bj.json",
    ]

    for name in candidates:
        path = data_dir / name
        if path.exists():
            return path

    return None


def load_config(data_dir: Optional[Path] = None, config_path: Optional[Path] = None) -> JournalConfig:
    """Load journal configuration.

    Args:
        data_dir: Directory holding day files (default: from environment)
        config_path: Optional explicit path to config file

    Returns:
        JournalConfig instance
    """
    if data_dir is None:
        data_dir = default_data_dir()

    if config_path is None:
        config_path = find_config_file(data_dir)

    if config_path is None:
        # No config file - use defaults
        return JournalConfig(data_dir=data_dir)

    suffix = config_path.suffix.lower()

    if suffix == ".toml":
        config_dict = load_toml_config(config_path)
        return dict_to_config(config_dict, data_dir)

    elif suffix == ".json":
        config_dict = load_json_config(config_path)
        return dict_to_config(config_dict, data_dir)

    else:
        raise ValueError(f"Unsupported config file type: {suffix}")
