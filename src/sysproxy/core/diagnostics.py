"""Diagnostics collection."""

from __future__ import annotations

import platform
import sys
from typing import Mapping

from sysproxy.core.commands import tool_available
from sysproxy.core.desktop import DESKTOP_ENV_VAR, DesktopEnvironment, detect, read_desktop_signal
from sysproxy.core.errors import SysproxyError
from sysproxy.core.proxy_manager import SystemProxyManager
from sysproxy.core.storage import get_desktop_config_file, get_logs_dir
from sysproxy.core.stores import KIOSLAVERC_FILE

_TOOLS = ("gsettings", "kreadconfig5", "kwriteconfig5", "kreadconfig6", "kwriteconfig6")


def collect_diagnostics(
    environ: Mapping[str, str] | None = None,
    *,
    desktop: DesktopEnvironment | None = None,
) -> str:
    lines: list[str] = []
    lines.append("sysproxy diagnostics")
    lines.append("")

    lines.append("System")
    lines.append(f"- OS: {platform.system()} {platform.release()}")
    lines.append(f"- Arch: {platform.machine()}")
    lines.append(f"- Python: {sys.version.split()[0]}")
    lines.append("")

    if desktop is None:
        desktop = detect(environ)
    lines.append("Desktop Environment")
    lines.append(f"- {DESKTOP_ENV_VAR}: {read_desktop_signal(environ)}")
    lines.append(f"- Detected: {desktop.value}")
    lines.append("")

    lines.append("Tools")
    for name in _TOOLS:
        lines.append(f"- {name}: {'yes' if tool_available(name) else 'no'}")
    lines.append("")

    lines.append("Paths")
    lines.append(f"- Logs: {get_logs_dir()}")
    kioslaverc = get_desktop_config_file(KIOSLAVERC_FILE)
    lines.append(f"- kioslaverc: {'present' if kioslaverc.exists() else 'absent'} ({kioslaverc})")
    lines.append("")

    lines.append("System Proxy")
    if not desktop.is_supported:
        lines.append("- unsupported desktop")
    else:
        try:
            cfg = SystemProxyManager(desktop).get_system_proxy()
        except SysproxyError as exc:
            lines.append(f"- Error reading system proxy: {exc}")
        else:
            lines.append(f"- Enabled: {'yes' if cfg.enabled else 'no'}")
            lines.append(f"- Endpoint: {cfg.host}:{cfg.port}")
            lines.append(f"- Bypass: {cfg.bypass}")
    lines.append("")

    return "\n".join(lines)
