"""Output rendering layer for the ``2ndbrain`` CLI.

File: src/secondbrain/ui/render.py

Purpose
- Provide one place where user-visible lines are written, backed by a ``rich``
  console so success/warning/error lines and diffs are colored on a terminal.
- Respect the ``NO_COLOR`` environment variable and the ``--no-color`` flag.

What should be included in this file
- CLIRenderer with leveled line output and diff printing.
- ConsoleLog: leveled line logger (info/success/warn/error) used by commands.
- Diff colorization for review mode.
- Factory function to create a renderer with appropriate settings.

Functional requirements
- With color disabled the output is plain text, byte-for-byte what was passed in.
- Markup in file names is never interpreted.
"""

from __future__ import annotations

import os
import sys
from typing import TextIO

from rich.console import Console
from rich.style import Style
from rich.text import Text

_S_SUCCESS = Style(color="green")
_S_WARN = Style(color="yellow")
_S_ERROR = Style(color="red")
_S_HEADING = Style(bold=True)
_S_DIFF_ADD = Style(color="green")
_S_DIFF_DEL = Style(color="red")
_S_DIFF_HUNK = Style(color="cyan")
_S_DIFF_FILE = Style(color="yellow")

_NAMED_STYLES: dict[str, Style] = {
    "green": _S_SUCCESS,
    "yellow": _S_WARN,
    "red": _S_ERROR,
    "cyan": _S_DIFF_HUNK,
    "bold": _S_HEADING,
    "dim": Style(dim=True),
}


def _color_allowed(no_color_flag: bool) -> bool:
    """Check whether color output should be attempted."""

    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def diff_line_style(line: str) -> Style | None:
    """Style for one rendered diff line; ``None`` for context lines."""

    if line.startswith(("+++", "---")):
        return _S_DIFF_FILE
    if line.startswith("+"):
        return _S_DIFF_ADD
    if line.startswith("-"):
        return _S_DIFF_DEL
    if line.startswith("@@"):
        return _S_DIFF_HUNK
    return None


def colorize_diff(rendered: str) -> Text:
    """Build a styled ``Text`` for a rendered diff."""

    text = Text()
    lines = rendered.split("\n")
    for index, line in enumerate(lines):
        style = diff_line_style(line)
        text.append(line, style=style if style is not None else "")
        if index < len(lines) - 1:
            text.append("\n")
    return text


class CLIRenderer:
    """CLI output renderer over a ``rich`` console.

    Respects ``NO_COLOR`` env var and ``--no-color`` flag.
    """

    def __init__(
        self,
        *,
        no_color: bool = False,
        file: TextIO | None = None,
        force_terminal: bool | None = None,
    ) -> None:
        self.color = _color_allowed(no_color) if file is None else not no_color
        self.console = Console(
            file=file,
            no_color=not self.color,
            highlight=False,
            emoji=False,
            markup=False,
            soft_wrap=True,
            force_terminal=force_terminal,
        )

    def _print(self, line: str | Text, style: Style | str | None = None) -> None:
        if isinstance(style, str):
            style = _NAMED_STYLES.get(style)
        self.console.print(line, style=style or "")

    def text(self, line: str, *, style: Style | str | None = None) -> None:
        """Print a line, optionally styled."""

        self._print(line, style)

    def success(self, line: str) -> None:
        self._print(line, _S_SUCCESS)

    def warning(self, text: str) -> None:
        self._print(text, _S_WARN)

    def error(self, text: str) -> None:
        self._print(text, _S_ERROR)

    def diff(self, rendered: str) -> None:
        """Print a rendered diff, colored when color is enabled."""

        self.console.print(colorize_diff(rendered.rstrip("\n")))


class ConsoleLog:
    """Leveled user-visible lines: info plain, success green, warn yellow, error red."""

    def __init__(self, renderer: CLIRenderer) -> None:
        self.renderer = renderer

    def info(self, message: str) -> None:
        self.renderer.text(message)

    def success(self, message: str) -> None:
        self.renderer.success(message)

    def warn(self, message: str) -> None:
        self.renderer.warning(message)

    def error(self, message: str) -> None:
        self.renderer.error(message)


def create_renderer(*, no_color: bool = False, file: TextIO | None = None) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, file=file)


__all__ = [
    "CLIRenderer",
    "ConsoleLog",
    "colorize_diff",
    "create_renderer",
    "diff_line_style",
]
