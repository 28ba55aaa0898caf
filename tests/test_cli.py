from __future__ import annotations

import json
import subprocess

import pytest

import sysproxy.cli as cli
import sysproxy.core.commands as commands
from sysproxy.core.desktop import DesktopEnvironment


@pytest.fixture
def gsettings_state(monkeypatch) -> dict[tuple[str, str], str]:
    state = {
        ("org.gnome.system.proxy", "mode"): "'none'",
        ("org.gnome.system.proxy", "ignore-hosts"): "['localhost']",
        ("org.gnome.system.proxy.http", "host"): "''",
        ("org.gnome.system.proxy.http", "port"): "0",
        ("org.gnome.system.proxy.https", "host"): "''",
        ("org.gnome.system.proxy.https", "port"): "0",
        ("org.gnome.system.proxy.socks", "host"): "'10.0.0.1'",
        ("org.gnome.system.proxy.socks", "port"): "1080",
    }

    def fake_run(cmd, check, capture_output, timeout):  # noqa: ANN001
        if cmd[:2] == ["gsettings", "get"]:
            return subprocess.CompletedProcess(cmd, 0, stdout=f"{state[(cmd[2], cmd[3])]}\n".encode(), stderr=b"")
        if cmd[:2] == ["gsettings", "set"]:
            state[(cmd[2], cmd[3])] = cmd[4]
            return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")
        raise AssertionError(f"Unexpected command: {cmd}")

    monkeypatch.setattr(commands.subprocess, "run", fake_run)
    monkeypatch.setattr(cli, "setup_logging", lambda *_args, **_kwargs: None)
    monkeypatch.setenv("XDG_CURRENT_DESKTOP", "GNOME")
    return state


def test_get_prints_json(gsettings_state, capsys) -> None:
    assert cli.main(["get", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data == {"bypass": "localhost", "enabled": False, "host": "10.0.0.1", "port": 1080}


def test_get_prints_text(gsettings_state, capsys) -> None:
    assert cli.main(["get"]) == 0
    out = capsys.readouterr().out
    assert "enabled: no" in out
    assert "host: 10.0.0.1" in out


def test_set_writes_configuration(gsettings_state) -> None:
    assert cli.main(["set", "--host", "127.0.0.1", "--port", "8080", "--bypass", "a.com,b.com"]) == 0
    assert gsettings_state[("org.gnome.system.proxy", "mode")] == "'manual'"
    assert gsettings_state[("org.gnome.system.proxy.http", "host")] == "'127.0.0.1'"
    assert gsettings_state[("org.gnome.system.proxy.https", "port")] == "8080"
    assert gsettings_state[("org.gnome.system.proxy", "ignore-hosts")] == "['a.com', 'b.com']"


def test_enable_and_disable(gsettings_state) -> None:
    assert cli.main(["enable"]) == 0
    assert gsettings_state[("org.gnome.system.proxy", "mode")] == "'manual'"
    assert cli.main(["disable"]) == 0
    assert gsettings_state[("org.gnome.system.proxy", "mode")] == "'none'"


def test_set_rejects_invalid_port(gsettings_state, capsys) -> None:
    assert cli.main(["set", "--host", "h", "--port", "70000"]) == cli.EXIT_ERROR
    assert "between 0 and 65535" in capsys.readouterr().err
    assert gsettings_state[("org.gnome.system.proxy", "mode")] == "'none'"


def test_unsupported_desktop_exit_code(gsettings_state, monkeypatch, capsys) -> None:
    monkeypatch.setenv("XDG_CURRENT_DESKTOP", "XFCE")
    assert cli.main(["get"]) == cli.EXIT_NOT_SUPPORTED
    assert "not supported" in capsys.readouterr().err


def test_desktop_override(gsettings_state, monkeypatch, capsys) -> None:
    monkeypatch.delenv("XDG_CURRENT_DESKTOP")
    assert cli.main(["--desktop", "GNOME", "get", "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["host"] == "10.0.0.1"


def test_diagnostics_command(monkeypatch, capsys) -> None:
    seen: list[object] = []

    def fake_collect(*, desktop=None):  # noqa: ANN001
        seen.append(desktop)
        return "report"

    monkeypatch.setattr(cli, "setup_logging", lambda *_args, **_kwargs: None)
    monkeypatch.setattr(cli, "collect_diagnostics", fake_collect)
    assert cli.main(["diagnostics"]) == 0
    assert capsys.readouterr().out.strip() == "report"
    assert seen == [None]


def test_diagnostics_command_honours_desktop_override(monkeypatch, capsys) -> None:
    seen: list[object] = []

    def fake_collect(*, desktop=None):  # noqa: ANN001
        seen.append(desktop)
        return "report"

    monkeypatch.setattr(cli, "setup_logging", lambda *_args, **_kwargs: None)
    monkeypatch.setattr(cli, "collect_diagnostics", fake_collect)
    assert cli.main(["--desktop", "KDE", "diagnostics"]) == 0
    assert seen == [DesktopEnvironment.KDE]
