"""Terminal output for the ``sprint add`` flow.

The result line goes to stdout. Progress, prompt hints, warnings and errors
go to stderr so stdout only carries the outcome. ANSI colour is used on a
TTY unless ``NO_COLOR`` is set or ``TERM=dumb``.
"""

from __future__ import annotations

import os
import sys
from typing import TextIO

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"

# kind -> (marker, colour)
_MARKERS = {
    "success": ("✓", GREEN),
    "error": ("✗", RED),
    "warning": ("⚠", YELLOW),
    "progress": ("ℹ", BLUE),
}


def use_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("TERM") == "dumb":
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def colorize(text: str, *codes: str, stream: TextIO | None = None) -> str:
    if not codes or not use_color(stream or sys.stdout):
        return text
    return "".join(codes) + text + RESET


def prompt_label(message: str, stream: TextIO | None = None) -> str:
    """``? Sprint ID: `` with a green marker."""
    return colorize("?", BOLD, GREEN, stream=stream) + f" {message}: "


def _status(kind: str, message: str, stream: TextIO) -> None:
    marker, color = _MARKERS[kind]
    print(f"{colorize(marker, BOLD, color, stream=stream)} {message}", file=stream)


def print_success(message: str, stream: TextIO | None = None) -> None:
    _status("success", message, stream or sys.stdout)


def print_error(message: str, stream: TextIO | None = None) -> None:
    _status("error", message, stream or sys.stderr)


def print_warning(message: str, stream: TextIO | None = None) -> None:
    _status("warning", message, stream or sys.stderr)


def print_progress(message: str, *, quiet: bool = False, stream: TextIO | None = None) -> None:
    if not quiet:
        _status("progress", message, stream or sys.stderr)


def print_hint(message: str, stream: TextIO | None = None) -> None:
    """Dimmed, indented help line shown above a prompt."""
    stream = stream or sys.stderr
    print(colorize(f"  {message}", DIM, stream=stream), file=stream)


__all__ = [
    "colorize",
    "print_error",
    "print_hint",
    "print_progress",
    "print_success",
    "print_warning",
    "prompt_label",
    "use_color",
]
