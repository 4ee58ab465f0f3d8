"""Helpers shared by the vault lifecycle commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from secondbrain.domain.models import FileChange, MergeReport, ReconciliationKind
from secondbrain.errors import NotAProjectError, TemplateNotFoundError
from secondbrain.layout import (
    AGENTS_INBOX,
    INBOX_DIR,
    MEMBER_FILES,
    MEMBER_PLACEHOLDER,
    MEMBER_TEMPLATE_DIR,
    is_project,
)
from secondbrain.reconcile.confirm import LineLogger
from secondbrain.reconcile.differ import contents_equal, diff_texts, summarize_changes
from secondbrain.utils.fs import PathLike

DiffPrinter = Callable[[str], None]


class NullLog:
    """Line logger that drops everything."""

    def info(self, message: str) -> None:
        return None

    def success(self, message: str) -> None:
        return None

    def warn(self, message: str) -> None:
        return None

    def error(self, message: str) -> None:
        return None


def resolve_log(log: LineLogger | None) -> LineLogger:
    return log if log is not None else NullLog()


def resolve_template_root(template: PathLike) -> Path:
    root = Path(template).expanduser().resolve()
    if not root.is_dir():
        raise TemplateNotFoundError(root)
    return root


def require_project(target: PathLike, *, hint: str | None = None) -> Path:
    root = Path(target).expanduser().resolve()
    if not is_project(root):
        raise NotAProjectError(root, hint=hint)
    return root


def read_text_or_empty(path: Path) -> str | None:
    """UTF-8 text of ``path``, ``""`` when absent, ``None`` when not decodable."""

    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError):
        return ""
    except UnicodeDecodeError:
        return None


def print_text_diff(
    old_path: Path, new_text: str | None, label: str, printer: DiffPrinter
) -> None:
    """Render the diff from the current file at ``old_path`` to ``new_text``."""

    old_text = read_text_or_empty(old_path)
    if old_text is None or new_text is None:
        printer(f"(no text diff for {label}: content is not UTF-8)")
        return
    rendered = diff_texts(old_text, new_text, label, label).rendered
    printer(rendered)


def log_merge_report(report: MergeReport, log: LineLogger, *, indent: str = "  ") -> None:
    """One glyph line per config-directory outcome, grouped by action."""

    emit = log.info if report.dry_run else log.success
    for outcome in report.added:
        emit(f"{indent}+ {outcome.path}")
    for outcome in report.updated:
        emit(f"{indent}↻ {outcome.path}")
    for outcome in report.merged:
        parts: list[str] = []
        if outcome.added_items:
            parts.append(f"+{', '.join(outcome.added_items)}")
        if outcome.removed_items:
            parts.append(f"-{', '.join(outcome.removed_items)}")
        emit(f"{indent}↻ {outcome.path} ({' '.join(parts)})")
    for outcome in report.unchanged:
        log.info(f"{indent}= {outcome.path}")
    for outcome in report.preserved:
        log.info(f"{indent}= {outcome.path} (preserved)")
    for outcome in report.errors:
        log.error(f"{indent}! {outcome.path} ({outcome.reason})")


def log_merge_summary(report: MergeReport, log: LineLogger) -> None:
    log.info(f"  New files: {len(report.added)}")
    log.info(f"  Updated: {len(report.updated)}")
    log.info(f"  Merged: {len(report.merged)}")
    log.info(f"  Unchanged: {len(report.unchanged)}")
    log.info(f"  Preserved: {len(report.preserved)}")


def list_members(target_root: Path) -> list[str]:
    """Member directories under the inbox: every subdirectory except the agents' and dot dirs."""

    inbox = target_root / INBOX_DIR
    if not inbox.is_dir():
        return []
    return sorted(
        entry.name
        for entry in inbox.iterdir()
        if entry.is_dir() and entry.name != AGENTS_INBOX and not entry.name.startswith(".")
    )


def render_member_file(template_file: Path, member_name: str) -> str:
    return template_file.read_text(encoding="utf-8").replace(MEMBER_PLACEHOLDER, member_name)


@dataclass(slots=True)
class MemberDashboardPlan:
    """Pending member dashboard rewrites, keyed by vault-relative path."""

    changes: list[FileChange] = field(default_factory=list)
    contents: dict[str, str] = field(default_factory=dict)
    outputs: dict[str, Path] = field(default_factory=dict)
    unchanged: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "changes": [change.to_dict() for change in self.changes],
            "unchanged": list(self.unchanged),
            "errors": list(self.errors),
        }


def plan_member_dashboards(target_root: Path, template_root: Path) -> MemberDashboardPlan:
    """Compare every member's dashboards with the template's member templates."""

    plan = MemberDashboardPlan()
    template_dir = template_root / MEMBER_TEMPLATE_DIR
    for member_name in list_members(target_root):
        for member_file in MEMBER_FILES:
            template_file = template_dir / member_file.template
            if not template_file.is_file():
                continue
            relative = f"{INBOX_DIR}/{member_name}/{member_file.output}"
            output = target_root / relative
            try:
                new_text = render_member_file(template_file, member_name)
                old_text = read_text_or_empty(output)
            except (OSError, UnicodeDecodeError) as exc:
                plan.errors.append(f"{relative}: {exc}")
                continue
            if old_text is None:
                plan.errors.append(f"{relative}: not valid UTF-8")
                continue
            if output.is_file() and contents_equal(old_text, new_text):
                plan.unchanged.append(relative)
                continue
            summary = summarize_changes(old_text, new_text)
            plan.changes.append(
                FileChange(
                    file=relative,
                    kind=(
                        ReconciliationKind.CHANGED
                        if output.is_file()
                        else ReconciliationKind.CREATED
                    ),
                    added=summary.added,
                    removed=summary.removed,
                )
            )
            plan.contents[relative] = new_text
            plan.outputs[relative] = output
    return plan


__all__ = [
    "DiffPrinter",
    "MemberDashboardPlan",
    "NullLog",
    "list_members",
    "log_merge_report",
    "log_merge_summary",
    "plan_member_dashboards",
    "print_text_diff",
    "read_text_or_empty",
    "render_member_file",
    "require_project",
    "resolve_log",
    "resolve_template_root",
]
