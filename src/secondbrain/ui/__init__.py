"""UI package exports for the CLI, rendering and terminal prompts."""

from secondbrain.ui.cli import CLIError, build_parser, main, run_cli
from secondbrain.ui.prompts import TerminalAsker
from secondbrain.ui.render import CLIRenderer, ConsoleLog, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "ConsoleLog",
    "TerminalAsker",
    "build_parser",
    "create_renderer",
    "main",
    "run_cli",
]
