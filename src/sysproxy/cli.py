"""Command-line entry point.

Usage:
    sysproxy get [--json]
    sysproxy set --host HOST --port PORT [--bypass LIST] [--disable]
    sysproxy enable | disable
    sysproxy diagnostics
"""

from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import logging
import sys
from typing import Sequence

from sysproxy.core.desktop import DesktopEnvironment
from sysproxy.core.diagnostics import collect_diagnostics
from sysproxy.core.errors import NotSupportError, SysproxyError
from sysproxy.core.logging_setup import setup_logging
from sysproxy.core.proxy_manager import ProxyConfig, SystemProxyManager

logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_NOT_SUPPORTED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysproxy",
        description="Read or change the desktop-wide proxy settings (GNOME/KDE).",
    )
    parser.add_argument(
        "--desktop",
        choices=[DesktopEnvironment.GNOME.value, DesktopEnvironment.KDE.value],
        help="Override XDG_CURRENT_DESKTOP detection",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log commands to the console")

    sub = parser.add_subparsers(dest="command", required=True)

    get_cmd = sub.add_parser("get", help="Print the current proxy configuration")
    get_cmd.add_argument("--json", action="store_true", help="Print as JSON")

    set_cmd = sub.add_parser("set", help="Write the proxy configuration")
    set_cmd.add_argument("--host", required=True)
    set_cmd.add_argument("--port", required=True, type=int)
    set_cmd.add_argument("--bypass", default="localhost,127.0.0.1")
    set_cmd.add_argument("--disable", action="store_true", help="Write the flag as disabled")

    sub.add_parser("enable", help="Turn the system proxy on")
    sub.add_parser("disable", help="Turn the system proxy off")
    sub.add_parser("diagnostics", help="Print an environment report")
    return parser


def _format_config(cfg: ProxyConfig, as_json: bool) -> str:
    if as_json:
        return json.dumps(asdict(cfg), indent=2, sort_keys=True)
    return "\n".join(
        [
            f"enabled: {'yes' if cfg.enabled else 'no'}",
            f"host: {cfg.host}",
            f"port: {cfg.port}",
            f"bypass: {cfg.bypass}",
        ]
    )


def run(args: argparse.Namespace) -> int:
    desktop = DesktopEnvironment(args.desktop) if args.desktop else None
    if args.command == "diagnostics":
        print(collect_diagnostics(desktop=desktop))
        return 0

    manager = SystemProxyManager(desktop)

    if args.command == "get":
        print(_format_config(manager.get_system_proxy(), args.json))
    elif args.command == "set":
        manager.set_system_proxy(
            ProxyConfig(
                enabled=not args.disable,
                host=args.host,
                port=args.port,
                bypass=args.bypass,
            )
        )
    elif args.command == "enable":
        manager.set_enable(True)
    elif args.command == "disable":
        manager.set_enable(False)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.INFO if args.verbose else logging.WARNING)

    try:
        return run(args)
    except NotSupportError as exc:
        print(exc.user_message, file=sys.stderr)
        return EXIT_NOT_SUPPORTED
    except SysproxyError as exc:
        logger.info("sysproxy %s failed", args.command, exc_info=True)
        print(exc.user_message, file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
