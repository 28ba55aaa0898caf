"""Storage paths."""

from __future__ import annotations

from pathlib import Path

from platformdirs import user_config_path, user_state_path

APP_NAME = "sysproxy"


def get_state_dir() -> Path:
    return Path(user_state_path(APP_NAME))


def get_logs_dir() -> Path:
    return get_state_dir() / "logs"


def get_desktop_config_dir() -> Path:
    # Shared XDG config home, not an app-specific directory.
    return Path(user_config_path())


def get_desktop_config_file(name: str) -> Path:
    return get_desktop_config_dir() / name
