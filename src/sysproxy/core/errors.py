"""Typed errors with user-facing messages."""

from __future__ import annotations


class SysproxyError(Exception):
    """Base error for system proxy operations."""

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class NotSupportError(SysproxyError):
    def __init__(self, desktop: str = "") -> None:
        detail = desktop or "unset"
        super().__init__(
            f"Desktop environment not supported: {detail}",
            user_message="System proxy is not supported on this desktop/session.",
        )
        self.desktop = desktop


class ParseStrError(SysproxyError):
    def __init__(self, field: str, detail: str | None = None) -> None:
        message = f"Failed to parse {field}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, user_message=f"Unexpected system proxy value for {field}.")
        self.field = field


class CommandError(SysproxyError):
    pass
