"""ANSI color helpers for error messages.

Colors are only emitted when stdout is a TTY. ``NO_COLOR`` disables them and
``FORCE_COLOR`` enables them regardless of the TTY check.
"""

from __future__ import annotations

import os
import re
import sys

_CODES = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
}

_ANSI_RE = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")


def _should_use_colors() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _should_use_colors()


def supports_color() -> bool:
    return _USE_COLORS


def colorize(text: str, *styles: str) -> str:
    """Wrap ``text`` in the given styles when colors are enabled."""
    if not _USE_COLORS or not styles:
        return text
    prefix = "".join(_CODES.get(style, "") for style in styles)
    if not prefix:
        return text
    return f"{prefix}{text}{_CODES['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI escape sequences."""
    return _ANSI_RE.sub("", text)


def location(text: str) -> str:
    return colorize(text, "cyan")


def hint(text: str) -> str:
    return colorize(text, "green")


def suggestion(text: str) -> str:
    return colorize(text, "bright_green", "bold")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def error_line(text: str) -> str:
    return colorize(text, "bright_red")


def format_error_header(code: str | None, message: str) -> str:
    """Prefix ``message`` with a bold error code when one is given."""
    if code:
        return f"{colorize(code, 'bright_red', 'bold')}: {message}"
    return message


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """Format one snippet line; the error line gets a ``>`` marker."""
    marker = ">" if is_error else " "
    number = colorize(f"{marker}{lineno:>3}", "yellow")
    body = error_line(content) if is_error else dim_text(content)
    return f"{number} | {body}"
