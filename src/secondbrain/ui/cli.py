"""Command-line interface router for ``2ndbrain``."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import structlog

from secondbrain import __version__
from secondbrain.commands import SUPPORTED_SHELLS, completion, init, member, remove, update
from secondbrain.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from secondbrain.errors import SecondBrainError
from secondbrain.layout import default_template_root
from secondbrain.observability import configure_logging
from secondbrain.ui.prompts import TerminalAsker
from secondbrain.ui.render import CLIRenderer, ConsoleLog, create_renderer

_log = structlog.get_logger(__name__)

LOG_LEVEL_CHOICES: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class _Session:
    """Per-invocation wiring shared by the command handlers."""

    config: dict[str, Any]
    renderer: CLIRenderer
    log: ConsoleLog | None
    asker: TerminalAsker
    diff_printer: Callable[[str], None]
    json_output: bool


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for the vault lifecycle commands."""

    parser = argparse.ArgumentParser(
        prog="2ndbrain",
        description=(
            "2ndbrain — keep a 2ndBrain vault in sync with its template.\n\n"
            "Common workflows:\n"
            "  2ndbrain init my-vault          Create a new vault\n"
            "  2ndbrain update --dry-run       Preview template changes\n"
            "  2ndbrain update                 Review and apply template changes\n"
            "  2ndbrain member alice           Add a member dashboard\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to 2ndbrain TOML config (default: ./2ndbrain.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show diagnostic events at INFO level.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )
    common.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Emit a deterministic JSON report instead of progress lines.",
    )
    common.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVEL_CHOICES,
        default=None,
        help="Diagnostic log level on stderr (default: WARNING).",
    )
    common.add_argument(
        "--log-file",
        default=None,
        help="Also write diagnostic events to this file as JSON lines.",
    )

    template_option = argparse.ArgumentParser(add_help=False)
    template_option.add_argument(
        "-t",
        "--template",
        default=None,
        help="Use a custom template directory (default: the bundled template).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # init ----------------------------------------------------------------
    init_parser = subparsers.add_parser(
        "init",
        parents=[common, template_option],
        help="Initialize a new 2ndBrain project",
        description=(
            "Create a vault from the template, or integrate the framework into an\n"
            "existing directory without touching your notes.\n\n"
            "Examples:\n"
            "  2ndbrain init my-vault\n"
            "  2ndbrain init . --reset-config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    init_parser.add_argument("path", nargs="?", default=".", help="Target directory")
    init_parser.add_argument(
        "-f", "--force", action="store_true", help="Reinitialize an existing project"
    )
    init_parser.add_argument(
        "--reset-config",
        action="store_true",
        help="Replace .obsidian with the template copy (asks first unless --force)",
    )
    init_parser.set_defaults(handler=_cmd_init)

    # update --------------------------------------------------------------
    update_parser = subparsers.add_parser(
        "update",
        parents=[common, template_option],
        help="Update framework files from template",
        description=(
            "Compare framework files, .obsidian and member dashboards with the\n"
            "template and apply the differences after confirmation.\n\n"
            "Examples:\n"
            "  2ndbrain update --dry-run\n"
            "  2ndbrain update --yes\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    update_parser.add_argument("path", nargs="?", default=".", help="Project directory")
    update_parser.add_argument(
        "-d", "--dry-run", action="store_true", help="Show what would be updated"
    )
    update_parser.add_argument(
        "-y", "--yes", action="store_true", help="Apply all changes without prompting"
    )
    update_parser.set_defaults(handler=_cmd_update)

    # remove --------------------------------------------------------------
    remove_parser = subparsers.add_parser(
        "remove",
        parents=[common],
        help="Remove framework files (preserves user data)",
        description=(
            "Delete framework files and the framework directories left empty.\n"
            "20_Areas, 30_Projects, 40_Resources and 90_Archives are never touched.\n\n"
            "Examples:\n"
            "  2ndbrain remove --dry-run\n"
            "  2ndbrain remove --force\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    remove_parser.add_argument("path", nargs="?", default=".", help="Project directory")
    remove_parser.add_argument(
        "-d", "--dry-run", action="store_true", help="Show what would be removed"
    )
    remove_parser.add_argument(
        "-f", "--force", action="store_true", help="Force removal without confirmation"
    )
    remove_parser.set_defaults(handler=_cmd_remove)

    # member --------------------------------------------------------------
    member_parser = subparsers.add_parser(
        "member",
        parents=[common],
        help="Initialize a new member directory",
        description=(
            "Create 10_Inbox/<name> with a personal task dashboard and point\n"
            "Obsidian daily notes at it.\n\n"
            "Examples:\n"
            "  2ndbrain member alice\n"
            "  2ndbrain member bob ~/vault --no-config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    member_parser.add_argument("name", help="Member name")
    member_parser.add_argument("path", nargs="?", default=".", help="Project directory")
    member_parser.add_argument(
        "-f", "--force", action="store_true", help="Force overwrite existing member"
    )
    member_parser.add_argument(
        "--no-config",
        dest="configure_daily_notes",
        action="store_false",
        help="Skip Obsidian config update",
    )
    member_parser.set_defaults(handler=_cmd_member)

    # completion ----------------------------------------------------------
    completion_parser = subparsers.add_parser(
        "completion",
        help="Generate shell completion script",
        description=(
            "Print a shell completion script to stdout.\n\n"
            "Examples:\n"
            "  source <(2ndbrain completion bash)\n"
            "  2ndbrain completion zsh > ~/.zfunc/_2ndbrain\n"
            "  2ndbrain completion fish > ~/.config/fish/completions/2ndbrain.fish\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    completion_parser.add_argument(
        "shell",
        metavar="shell",
        help=f"Target shell ({', '.join(SUPPORTED_SHELLS)})",
    )
    completion_parser.set_defaults(handler=_cmd_completion)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
        description=(
            "Display the effective config after merging defaults, file, env and flags.\n\n"
            "Examples:\n"
            "  2ndbrain config\n"
            "  2ndbrain config --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_init(args: argparse.Namespace) -> int:
    with _command_session(args) as session:
        report = _guarded(
            lambda: init(
                args.path,
                _template_root(args, session.config),
                force=_flag(args, "force"),
                reset_config=_flag(args, "reset_config"),
                asker=session.asker,
                log=session.log,
            )
        )
        return _finish(session, "init", report.to_dict(), report.error_count)


def _cmd_update(args: argparse.Namespace) -> int:
    with _command_session(args) as session:
        report = _guarded(
            lambda: update(
                args.path,
                _template_root(args, session.config),
                dry_run=_flag(args, "dry_run"),
                yes=_flag(args, "yes"),
                asker=session.asker,
                log=session.log,
                diff_printer=session.diff_printer,
            )
        )
        return _finish(session, "update", report.to_dict(), report.error_count)


def _cmd_remove(args: argparse.Namespace) -> int:
    with _command_session(args) as session:
        report = _guarded(
            lambda: remove(
                args.path,
                dry_run=_flag(args, "dry_run"),
                force=_flag(args, "force"),
                log=session.log,
            )
        )
        return _finish(session, "remove", report.to_dict(), report.error_count)


def _cmd_member(args: argparse.Namespace) -> int:
    with _command_session(args) as session:
        report = _guarded(
            lambda: member(
                args.name,
                args.path,
                force=_flag(args, "force"),
                configure_daily_notes=bool(getattr(args, "configure_daily_notes", True)),
                log=session.log,
            )
        )
        return _finish(session, "member", report.to_dict(), report.error_count)


def _cmd_completion(args: argparse.Namespace) -> int:
    shell = getattr(args, "shell", None)
    script = completion(shell) if isinstance(shell, str) else None
    if script is None:
        raise CLIError(
            f"unsupported shell: {shell} (supported: {', '.join(SUPPORTED_SHELLS)})",
            exit_code=2,
        )
    sys.stdout.write(script)
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    if _flag(args, "json"):
        _emit_json({"command": "config", "config": config})
        return 0

    renderer = _get_renderer(args, config)
    renderer.text(dump_effective_config(config, indent=2))
    return 0


# ---------------------------------------------------------------------------
# Session wiring
# ---------------------------------------------------------------------------


@contextmanager
def _command_session(args: argparse.Namespace) -> Iterator[_Session]:
    """Load config, configure logging and build the output objects for one command."""

    config = _load_effective_config(args)
    logging_cfg = config["logging"]
    level = logging_cfg["level"]
    if config["output"]["verbose"] and level in {"WARNING", "ERROR"}:
        level = "INFO"
    handle = configure_logging(level, logging_cfg["log_file"] or None)
    json_output = _flag(args, "json")
    renderer = _get_renderer(args, config)
    # JSON mode keeps stdout for the report; prompts and diffs go to stderr.
    prompt_renderer = (
        create_renderer(no_color=not config["output"]["color"], file=sys.stderr)
        if json_output
        else renderer
    )
    _log.debug("command_started", command=args.command, json=json_output)
    try:
        yield _Session(
            config=config,
            renderer=renderer,
            log=None if json_output else ConsoleLog(renderer),
            asker=TerminalAsker(prompt_renderer),
            diff_printer=prompt_renderer.diff,
            json_output=json_output,
        )
    finally:
        handle.shutdown()


def _guarded(action: Any) -> Any:
    try:
        return action()
    except SecondBrainError as exc:
        raise CLIError(str(exc), exit_code=1) from exc


def _finish(session: _Session, command: str, payload: Mapping[str, object], errors: int) -> int:
    if session.json_output:
        _emit_json({"command": command, **payload})
    return 1 if errors else 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace, config: Mapping[str, Any]) -> CLIRenderer:
    output = config["output"]
    return create_renderer(no_color=not output["color"])


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, object] = {
        "output.color": False if _flag(args, "no_color") else None,
        "output.verbose": True if _flag(args, "verbose") else None,
        "logging.level": getattr(args, "log_level", None),
        "logging.log_file": getattr(args, "log_file", None),
        "template.root": getattr(args, "template", None),
    }
    try:
        return load_config(
            _optional_str(getattr(args, "config_path", None)), cli_overrides=overrides
        )
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _template_root(args: argparse.Namespace, config: Mapping[str, Any]) -> Path:
    configured = config["template"]["root"]
    return Path(configured) if configured else default_template_root()


def _optional_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "main", "run_cli"]
