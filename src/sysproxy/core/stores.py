"""Scalar access to the desktop proxy settings stores.

GNOME keeps proxy settings in the GSettings database, reached through the
``gsettings`` CLI. KDE keeps them in the ``kioslaverc`` INI file, reached through
``kreadconfig5``/``kwriteconfig5`` (or their Plasma 6 counterparts).

Both stores move raw text only; quoting and list encodings live in
``sysproxy.core.codec``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Final

from sysproxy.core.commands import DEFAULT_TIMEOUT_S, find_tool, run_command
from sysproxy.core.desktop import DesktopEnvironment
from sysproxy.core.errors import NotSupportError
from sysproxy.core.storage import get_desktop_config_file

logger = logging.getLogger(__name__)

KIOSLAVERC_FILE: Final[str] = "kioslaverc"


@dataclass(frozen=True, slots=True)
class SettingKey:
    """One scalar in a store: a gsettings schema or a KConfig group, plus a key."""

    section: str
    name: str

    def __str__(self) -> str:
        return f"{self.section}:{self.name}"


class SettingsStore(ABC):
    @abstractmethod
    def get_scalar(self, key: SettingKey) -> str:
        """Return the trimmed raw value of ``key``."""

    @abstractmethod
    def set_scalar(self, key: SettingKey, value: str) -> None:
        """Write ``value`` verbatim to ``key``."""


class GSettingsStore(SettingsStore):
    def __init__(self, *, program: str = "gsettings", timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self._program = program
        self._timeout_s = timeout_s

    def get_scalar(self, key: SettingKey) -> str:
        result = run_command(
            [self._program, "get", key.section, key.name],
            timeout_s=self._timeout_s,
        )
        return result.text(key.name)

    def set_scalar(self, key: SettingKey, value: str) -> None:
        run_command(
            [self._program, "set", key.section, key.name, value],
            check=True,
            timeout_s=self._timeout_s,
        )


class KConfigStore(SettingsStore):
    def __init__(
        self,
        *,
        config_file: Path | None = None,
        read_program: str | None = None,
        write_program: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self._config_file = config_file
        self._read_program = read_program
        self._write_program = write_program
        self._timeout_s = timeout_s

    @property
    def config_file(self) -> Path:
        if self._config_file is None:
            return get_desktop_config_file(KIOSLAVERC_FILE)
        return self._config_file

    @property
    def read_program(self) -> str:
        return self._read_program or find_tool("kreadconfig5", "kreadconfig6")

    @property
    def write_program(self) -> str:
        return self._write_program or find_tool("kwriteconfig5", "kwriteconfig6")

    def _args(self, key: SettingKey) -> list[str]:
        return ["--file", str(self.config_file), "--group", key.section, "--key", key.name]

    def get_scalar(self, key: SettingKey) -> str:
        result = run_command([self.read_program, *self._args(key)], timeout_s=self._timeout_s)
        return result.text(key.name)

    def set_scalar(self, key: SettingKey, value: str) -> None:
        run_command(
            [self.write_program, *self._args(key), value],
            check=True,
            timeout_s=self._timeout_s,
        )


def store_for(desktop: DesktopEnvironment) -> SettingsStore:
    if desktop is DesktopEnvironment.GNOME:
        return GSettingsStore()
    if desktop is DesktopEnvironment.KDE:
        return KConfigStore()
    raise NotSupportError(desktop.value)
