"""Text encodings used by the desktop proxy stores.

All helpers here are pure and store-agnostic:

- gsettings strings are single-quoted (``'proxy.local'``) and string lists are
  bracketed, quoted CSV (``['localhost', '127.0.0.0/8']``).
- kioslaverc endpoints are ``<scheme>://<host> <port>`` and its bypass list is a
  plain CSV.

Ports that fail to parse fall back to ``DEFAULT_PORT`` instead of raising, so a
corrupt port value reads back as 80.
"""

from __future__ import annotations

import logging
from typing import Final

from sysproxy.core.errors import ParseStrError

logger = logging.getLogger(__name__)

DEFAULT_PORT: Final[int] = 80
MAX_PORT: Final[int] = 65535

_KDE_SCHEME_PREFIXES: Final[tuple[str, ...]] = ("http://", "socks://")
_QUOTE_CHARS: Final[str] = "'\""
_EMPTY_STRV_TYPE: Final[str] = "@as "


def strip_quotes(text: str, quotes: str = "'") -> str:
    """Remove enclosing matching quote pairs.

    Unbalanced quotes are left alone, so ``"'abc"`` is returned unchanged.
    """
    while len(text) >= 2 and text[0] in quotes and text[-1] == text[0]:
        text = text[1:-1]
    return text


def quote_element(text: str) -> str:
    """Wrap in single quotes unless the whole element is already quoted.

    Otherwise stray quotes at either end are dropped, so ``'a`` becomes ``'a'`` and
    an empty element becomes ``''``.
    """
    if len(text) >= 2 and text[0] in _QUOTE_CHARS and text[-1] == text[0]:
        return text
    return f"'{text.strip(_QUOTE_CHARS)}'"


def format_gsettings_str(value: str) -> str:
    return f"'{value}'"


def strip_brackets(text: str) -> str:
    text = text.removeprefix("[")
    return text.removesuffix("]")


def parse_bypass_list(raw: str) -> str:
    """Turn a stored ignore-list into the canonical ``a,b,c`` form."""
    # gsettings prints an empty string array as "@as []".
    body = strip_brackets(raw.strip().removeprefix(_EMPTY_STRV_TYPE))
    return ",".join(strip_quotes(item.strip(), _QUOTE_CHARS) for item in body.split(","))


def format_bypass_list(canonical: str, *, bracketed: bool) -> str:
    """Render a canonical bypass list for a store.

    ``bracketed`` produces the gsettings ``['a', 'b']`` form; otherwise the
    canonical list is returned as-is.
    """
    if not bracketed:
        return canonical
    if not canonical.strip():
        return "[]"
    quoted = ", ".join(quote_element(item.strip()) for item in canonical.split(","))
    return f"[{quoted}]"


def parse_port(raw: str) -> int:
    text = raw.strip()
    if text.isascii() and text.isdigit() and int(text) <= MAX_PORT:
        return int(text)
    logger.warning("Invalid proxy port %r; using %s", raw, DEFAULT_PORT)
    return DEFAULT_PORT


def kde_scheme(service: str) -> str:
    return "socks" if service == "socks" else "http"


def parse_kde_endpoint(raw: str, *, field: str) -> tuple[str, int]:
    """Split ``<scheme>://<host> <port>`` into host and port."""
    text = raw.strip()
    for prefix in _KDE_SCHEME_PREFIXES:
        text = text.removeprefix(prefix)
    host, sep, port = text.partition(" ")
    if not sep:
        raise ParseStrError(field, f"expected '<scheme>://<host> <port>', got {raw!r}")
    return strip_quotes(host), parse_port(port)


def format_kde_endpoint(service: str, host: str, port: int) -> str:
    return f"{kde_scheme(service)}://{host} {port}"
