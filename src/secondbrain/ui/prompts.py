"""Terminal-backed prompt capability for the confirmation controller."""

from __future__ import annotations

from typing import TextIO

from secondbrain.ui.render import CLIRenderer


class TerminalAsker:
    """Reads one line per prompt from ``stdin`` and writes through the renderer.

    End of input counts as an empty answer, so each prompt takes its default.
    """

    def __init__(self, renderer: CLIRenderer, *, stdin: TextIO | None = None) -> None:
        self._renderer = renderer
        self._stdin = stdin

    def ask(self, prompt: str) -> str:
        console = self._renderer.console
        if self._stdin is None:
            try:
                return console.input(prompt, markup=False)
            except EOFError:
                console.print()
                return ""
        console.print(prompt, end="")
        line = self._stdin.readline()
        if not line:
            console.print()
        return line.rstrip("\r\n")

    def say(self, line: str = "", *, style: str | None = None) -> None:
        self._renderer.text(line, style=style)


__all__ = ["TerminalAsker"]
