"""Blocking external command invocation and tool discovery."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import shlex
import shutil
import subprocess
from typing import Final, Sequence

from sysproxy.core.errors import CommandError, ParseStrError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S: Final[float] = 3.0


@dataclass(frozen=True, slots=True)
class CommandResult:
    cmd: list[str]
    returncode: int
    stdout: bytes

    def text(self, field: str) -> str:
        """Decode stdout as UTF-8 and trim it, naming ``field`` on failure."""
        try:
            return self.stdout.decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            raise ParseStrError(field, f"output of {format_cmd(self.cmd)} is not valid UTF-8") from exc


def format_cmd(cmd: Sequence[str]) -> str:
    try:
        return shlex.join(cmd)
    except Exception:
        return str(cmd)


def tool_available(name: str) -> bool:
    return shutil.which(name) is not None


def find_tool(*candidates: str) -> str:
    """Return the first candidate found on PATH, else the first candidate."""
    for name in candidates:
        if tool_available(name):
            return name
    return candidates[0]


def run_command(
    cmd: Sequence[str],
    *,
    check: bool = False,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> CommandResult:
    cmd = list(cmd)
    command_text = format_cmd(cmd)
    logger.info("Running command: %s", command_text)
    try:
        result = subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            timeout=timeout_s,
        )
    except subprocess.TimeoutExpired as exc:
        logger.exception("Command timed out: %s", command_text)
        raise CommandError(
            f"Command timed out: {command_text}",
            user_message="Timed out while accessing system proxy settings.",
        ) from exc
    except OSError as exc:
        logger.exception("Command execution failed: %s", command_text)
        raise CommandError(
            f"Command failed: {command_text}: {exc}",
            user_message="Failed to access system proxy settings (missing tools/permissions).",
        ) from exc

    stdout = result.stdout or b""
    stderr = (result.stderr or b"").decode("utf-8", errors="replace").strip()
    logger.info(
        "Command result rc=%s cmd=%s stdout=%r stderr=%r",
        result.returncode,
        command_text,
        stdout,
        stderr,
    )

    if result.returncode != 0:
        if not check:
            logger.warning("Ignoring rc=%s from read command: %s", result.returncode, command_text)
        else:
            detail = stderr or stdout.decode("utf-8", errors="replace").strip() or "unknown error"
            logger.error(
                "Command failed rc=%s cmd=%s stderr=%r",
                result.returncode,
                command_text,
                stderr,
            )
            raise CommandError(
                f"Command failed: {command_text}: {detail}",
                user_message=f"Failed to update system proxy settings: {detail}",
            )

    return CommandResult(cmd=cmd, returncode=result.returncode, stdout=stdout)
