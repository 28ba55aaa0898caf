"""Desktop environment detection."""

from __future__ import annotations

from enum import Enum
import os
from typing import Final, Mapping

DESKTOP_ENV_VAR: Final[str] = "XDG_CURRENT_DESKTOP"


class DesktopEnvironment(str, Enum):
    GNOME = "GNOME"
    KDE = "KDE"
    UNSUPPORTED = "unsupported"

    @property
    def is_supported(self) -> bool:
        return self is not DesktopEnvironment.UNSUPPORTED


def read_desktop_signal(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    return env.get(DESKTOP_ENV_VAR, "")


def detect(environ: Mapping[str, str] | None = None) -> DesktopEnvironment:
    """Classify the active desktop from ``XDG_CURRENT_DESKTOP``.

    Matching is exact and case-sensitive. Multi-valued signals such as
    ``ubuntu:GNOME`` are reported as unsupported.
    """
    signal = read_desktop_signal(environ)
    if signal == DesktopEnvironment.GNOME.value:
        return DesktopEnvironment.GNOME
    if signal == DesktopEnvironment.KDE.value:
        return DesktopEnvironment.KDE
    return DesktopEnvironment.UNSUPPORTED
