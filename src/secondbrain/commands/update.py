"""
secondbrain — update command

File: src/secondbrain/commands/update.py

Purpose
- Bring an existing vault's framework files, ``.obsidian`` configuration and
  member dashboards up to date with the template.

Flow
1. Analyze framework files without writing (dry-run reconcile).
2. Hand the change batch to the confirmation controller (or apply all with ``yes``).
3. Apply accepted entries with a forced reconcile.
4. Merge the configuration directory.
5. Refresh member dashboards, batch-confirmed the same way.

An aborted batch stops the run before anything is written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from secondbrain.commands._shared import (
    DiffPrinter,
    MemberDashboardPlan,
    log_merge_report,
    log_merge_summary,
    plan_member_dashboards,
    print_text_diff,
    read_text_or_empty,
    require_project,
    resolve_log,
    resolve_template_root,
)
from secondbrain.domain.models import (
    BatchResult,
    FileChange,
    MergeReport,
    ReconciliationKind,
)
from secondbrain.errors import ConfirmationRequiredError
from secondbrain.layout import CONFIG_DIR, FRAMEWORK_FILES
from secondbrain.reconcile.confirm import (
    Asker,
    ConfirmationController,
    ConfirmationResult,
    LineLogger,
    describe_change,
)
from secondbrain.reconcile.config_merge import merge_config_dir
from secondbrain.reconcile.files import create_file, reconcile_many, reconcile_one
from secondbrain.utils.fs import PathLike

_log = structlog.get_logger(__name__)

NOT_A_PROJECT_HINT = 'Run "2ndbrain init" first.'


@dataclass(slots=True)
class UpdateReport:
    target: Path
    template: Path
    dry_run: bool
    files: BatchResult
    confirmation: ConfirmationResult | None = None
    config: MergeReport | None = None
    members: MemberDashboardPlan = field(default_factory=MemberDashboardPlan)
    member_confirmation: ConfirmationResult | None = None
    cancelled: bool = False

    @property
    def error_count(self) -> int:
        count = len(self.files.errors) + len(self.members.errors)
        for result in (self.confirmation, self.member_confirmation):
            if result is not None:
                count += len(result.failed)
        if self.config is not None:
            count += len(self.config.errors)
        return count

    def to_dict(self) -> dict[str, object]:
        return {
            "target": self.target.as_posix(),
            "template": self.template.as_posix(),
            "dry_run": self.dry_run,
            "cancelled": self.cancelled,
            "files": self.files.to_dict(),
            "confirmation": self.confirmation.to_dict() if self.confirmation else None,
            "config": self.config.to_dict() if self.config else None,
            "members": self.members.to_dict(),
            "member_confirmation": (
                self.member_confirmation.to_dict() if self.member_confirmation else None
            ),
            "error_count": self.error_count,
        }


def update(
    target: PathLike,
    template: PathLike,
    *,
    dry_run: bool = False,
    yes: bool = False,
    asker: Asker | None = None,
    log: LineLogger | None = None,
    diff_printer: DiffPrinter | None = None,
) -> UpdateReport:
    """Update framework files, configuration and member dashboards of a vault."""

    out = resolve_log(log)
    template_root = resolve_template_root(template)

    target_root = Path(target).expanduser().resolve()
    out.info(f"Updating 2ndBrain project at: {target_root}")
    out.info(f"Using template from: {template_root}")
    target_root = require_project(target_root, hint=NOT_A_PROJECT_HINT)

    if not dry_run and not yes and asker is None:
        raise ConfirmationRequiredError("non-interactive update", "--yes")

    if dry_run:
        return _dry_run(target_root, template_root, out)
    return _apply(
        target_root,
        template_root,
        yes=yes,
        asker=asker,
        out=out,
        diff_printer=diff_printer if diff_printer is not None else out.info,
    )


def _dry_run(target_root: Path, template_root: Path, out: LineLogger) -> UpdateReport:
    out.warn("[DRY RUN] No files will be modified.")
    out.info("")
    out.info("Analyzing framework files...")

    files = reconcile_many(FRAMEWORK_FILES, template_root, target_root, dry_run=True)
    for result in files.results:
        if result.kind is ReconciliationKind.UNCHANGED:
            out.info(f"  = {result.path}")
        elif result.kind is ReconciliationKind.ERROR:
            out.error(f"  ! {result.path} (error: {result.message})")
        else:
            out.info(f"  * {result.path} {describe_change(FileChange.from_result(result))}")

    out.info("")
    out.info("Framework files summary:")
    out.info(f"  Unchanged: {len(files.unchanged)} files")
    out.info(f"  Would update: {len(files.skipped)} files")

    report = UpdateReport(target=target_root, template=template_root, dry_run=True, files=files)

    config_template = template_root / CONFIG_DIR
    if config_template.is_dir():
        out.info("")
        out.info(f"Analyzing {CONFIG_DIR} directory...")
        report.config = merge_config_dir(config_template, target_root / CONFIG_DIR, dry_run=True)
        log_merge_report(report.config, out)
        out.info("")
        out.info(f"{CONFIG_DIR} summary:")
        log_merge_summary(report.config, out)

    report.members = plan_member_dashboards(target_root, template_root)
    if report.members.changes:
        out.info("")
        out.info("Member dashboards that would be updated:")
        for change in report.members.changes:
            out.info(f"  {change.file} {describe_change(change)}")
    for error in report.members.errors:
        out.error(f"  ! {error}")
    return report


def _apply(
    target_root: Path,
    template_root: Path,
    *,
    yes: bool,
    asker: Asker | None,
    out: LineLogger,
    diff_printer: DiffPrinter,
) -> UpdateReport:
    out.info("Analyzing framework files...")
    analysis = reconcile_many(FRAMEWORK_FILES, template_root, target_root, dry_run=True)
    report = UpdateReport(
        target=target_root, template=template_root, dry_run=False, files=analysis
    )

    for relative in analysis.unchanged:
        out.info(f"  = {relative} (unchanged)")
    for error in analysis.errors:
        out.error(f"  ! {error}")

    if not analysis.changes:
        out.info("")
        if analysis.errors:
            out.warn(f"No framework files to update; {len(analysis.errors)} could not be checked.")
        else:
            out.success("All framework files are already up to date!")
    else:
        controller = ConfirmationController(
            _asker_or_fail(asker, yes),
            out,
            show_diff=lambda change: print_text_diff(
                target_root / change.file,
                read_text_or_empty(template_root / change.file),
                change.file,
                diff_printer,
            ),
        )
        announced = False

        def _apply_framework(change: FileChange) -> None:
            nonlocal announced
            if not announced:
                out.info("")
                out.info("Updating framework files...")
                announced = True
            result = reconcile_one(
                template_root / change.file, target_root / change.file, force=True
            )
            if result.kind is ReconciliationKind.ERROR:
                raise OSError(result.message)

        report.confirmation = controller.run(analysis.changes, _apply_framework, auto_yes=yes)
        if report.confirmation.aborted:
            out.info("Update cancelled.")
            report.cancelled = True
            return report
        out.info("")
        out.success("Framework files updated!")

    config_template = template_root / CONFIG_DIR
    if config_template.is_dir():
        out.info("")
        out.info(f"Updating {CONFIG_DIR} directory...")
        report.config = merge_config_dir(config_template, target_root / CONFIG_DIR)
        log_merge_report(report.config, out)
        out.info("")
        out.success(f"{CONFIG_DIR} directory updated!")
        log_merge_summary(report.config, out)

    _update_member_dashboards(report, yes=yes, asker=asker, out=out, diff_printer=diff_printer)
    _log.info(
        "update_complete",
        target=target_root.as_posix(),
        changes=len(analysis.changes),
        errors=report.error_count,
    )
    return report


def _update_member_dashboards(
    report: UpdateReport,
    *,
    yes: bool,
    asker: Asker | None,
    out: LineLogger,
    diff_printer: DiffPrinter,
) -> None:
    plan = plan_member_dashboards(report.target, report.template)
    report.members = plan
    if not plan.changes and not plan.unchanged and not plan.errors:
        return

    out.info("")
    out.info("Updating member dashboards...")
    for relative in plan.unchanged:
        out.info(f"  = {relative} (unchanged)")
    for error in plan.errors:
        out.error(f"  ! {error}")
    if not plan.changes:
        return

    controller = ConfirmationController(
        _asker_or_fail(asker, yes),
        out,
        show_diff=lambda change: print_text_diff(
            plan.outputs[change.file], plan.contents[change.file], change.file, diff_printer
        ),
    )
    report.member_confirmation = controller.run(
        plan.changes,
        lambda change: create_file(plan.outputs[change.file], plan.contents[change.file]),
        auto_yes=yes,
    )
    if report.member_confirmation.aborted:
        out.info("Member dashboard updates cancelled.")
        return
    out.success("Member dashboards updated!")


def _asker_or_fail(asker: Asker | None, yes: bool) -> Asker:
    if asker is not None:
        return asker
    if yes:
        return _NoPromptAsker()
    raise ConfirmationRequiredError("non-interactive update", "--yes")


class _NoPromptAsker:
    """Asker for auto-confirmed runs; the controller never prompts when ``auto_yes`` is set."""

    def ask(self, prompt: str) -> str:
        raise ConfirmationRequiredError("prompting", "an interactive terminal")

    def say(self, line: str = "", *, style: str | None = None) -> None:
        return None


__all__ = ["NOT_A_PROJECT_HINT", "UpdateReport", "update"]
