"""
secondbrain — init command

File: src/secondbrain/commands/init.py

Purpose
- Create a new vault from the template, or integrate the framework into an
  existing non-empty directory without touching user content.

Functional requirements
- Refuse an existing vault unless ``force``.
- Only missing directories are created; user-data directories get a ``.gitkeep``.
- Framework files are reconciled: new ones created, identical ones left alone.
- ``.obsidian`` is merged when present, copied when absent, or replaced when
  ``reset_config`` is confirmed.
- Init-only files are written once and never overwritten.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from secondbrain.commands._shared import (
    log_merge_report,
    resolve_log,
    resolve_template_root,
)
from secondbrain.domain.models import BatchResult, MergeReport, ReconciliationKind
from secondbrain.errors import AlreadyAProjectError, ConfirmationRequiredError
from secondbrain.layout import (
    CONFIG_DIR,
    FRAMEWORK_DIRS,
    FRAMEWORK_FILES,
    INIT_ONLY_FILES,
    USER_DATA_DIRS,
    is_project,
)
from secondbrain.reconcile.confirm import Asker, LineLogger, confirm
from secondbrain.reconcile.config_merge import (
    copy_config_dir,
    merge_config_dir,
    reset_config_dir,
)
from secondbrain.reconcile.files import (
    create_file,
    ensure_dirs,
    is_dir_empty,
    reconcile_many,
)
from secondbrain.utils.fs import PathLike

_log = structlog.get_logger(__name__)

GITKEEP = ".gitkeep"

_RESET_BANNER: tuple[str, ...] = (
    "",
    "╔════════════════════════════════════════════════════════════╗",
    "║          OBSIDIAN CONFIGURATION RESET WARNING              ║",
    "╚════════════════════════════════════════════════════════════╝",
    "",
    f"You are about to COMPLETELY REPLACE your {CONFIG_DIR} directory.",
    "This will delete all your Obsidian settings and preferences.",
    "",
)

NEXT_STEPS: tuple[str, ...] = (
    "Open this directory with Obsidian",
    "Run: ./99_System/Scripts/init_member.sh <your-name>",
    "Start recording your first task!",
)


@dataclass(slots=True)
class InitReport:
    target: Path
    template: Path
    integrated: bool
    reinitialized: bool
    files: BatchResult
    created_dirs: list[str] = field(default_factory=list)
    created_user_dirs: list[str] = field(default_factory=list)
    created_files: list[str] = field(default_factory=list)
    config_action: str = "none"
    config: MergeReport | None = None

    @property
    def error_count(self) -> int:
        config_errors = len(self.config.errors) if self.config is not None else 0
        return len(self.files.errors) + config_errors

    def to_dict(self) -> dict[str, object]:
        return {
            "target": self.target.as_posix(),
            "template": self.template.as_posix(),
            "integrated": self.integrated,
            "reinitialized": self.reinitialized,
            "files": self.files.to_dict(),
            "created_dirs": list(self.created_dirs),
            "created_user_dirs": list(self.created_user_dirs),
            "created_files": list(self.created_files),
            "config_action": self.config_action,
            "config": self.config.to_dict() if self.config else None,
            "error_count": self.error_count,
        }


def init(
    target: PathLike,
    template: PathLike,
    *,
    force: bool = False,
    reset_config: bool = False,
    asker: Asker | None = None,
    log: LineLogger | None = None,
) -> InitReport:
    """Initialize a vault at ``target`` or integrate the framework into it."""

    out = resolve_log(log)
    template_root = resolve_template_root(template)
    target_root = Path(target).expanduser().resolve()

    out.info(f"Initializing 2ndBrain project at: {target_root}")
    out.info(f"Using template from: {template_root}")

    existing = is_project(target_root)
    if existing:
        if not force:
            out.warn("This directory is already a 2ndBrain project.")
            out.info('Use "2ndbrain update" to update framework files.')
            out.info("Or use --force to reinitialize (this will overwrite framework files).")
            raise AlreadyAProjectError(target_root)
        out.warn("Reinitializing existing 2ndBrain project (--force)...")

    integrated = target_root.is_dir() and not is_dir_empty(target_root) and not existing
    target_root.mkdir(parents=True, exist_ok=True)

    if integrated:
        _announce_integration(target_root, out)

    out.info("Ensuring directories exist...")
    created_dirs = ensure_dirs(FRAMEWORK_DIRS, target_root)
    if created_dirs:
        for directory in created_dirs:
            out.success(f"  + {directory}/")
    else:
        out.info("  All framework directories exist")
    created_user_dirs = ensure_dirs(USER_DATA_DIRS, target_root)
    for directory in created_user_dirs:
        out.success(f"  + {directory}/ (user data)")

    out.info("Copying framework files...")
    files = reconcile_many(FRAMEWORK_FILES, template_root, target_root)
    for result in files.results:
        if result.kind is ReconciliationKind.UNCHANGED:
            out.info(f"  = {result.path} (exists, unchanged)")
        elif result.kind is ReconciliationKind.ERROR:
            out.error(f"  ! {result.path} (error: {result.message})")
        else:
            out.success(f"  + {result.path}")

    report = InitReport(
        target=target_root,
        template=template_root,
        integrated=integrated,
        reinitialized=existing,
        files=files,
        created_dirs=created_dirs,
        created_user_dirs=created_user_dirs,
    )

    out.info(f"Processing {CONFIG_DIR} configuration...")
    config_template = template_root / CONFIG_DIR
    config_target = target_root / CONFIG_DIR
    if config_template.is_dir():
        if reset_config:
            report.config_action = _reset_config(
                config_template, config_target, out, asker=asker, force=force
            )
        elif config_target.is_dir():
            out.info(f"  Merging {CONFIG_DIR}/ (preserving your settings)...")
            report.config = merge_config_dir(config_template, config_target)
            log_merge_report(report.config, out, indent="    ")
            merged = report.config
            touched = len(merged.added) + len(merged.merged) + len(merged.updated)
            out.success(f"  {CONFIG_DIR}/ merged: {touched} updated")
            report.config_action = "merged"
        else:
            copy_config_dir(config_template, config_target)
            out.success(f"  + {CONFIG_DIR}/")
            report.config_action = "copied"

    out.info("Creating initial files...")
    for init_file in INIT_ONLY_FILES:
        path = target_root / init_file.path
        if path.exists():
            continue
        create_file(path, init_file.content)
        report.created_files.append(init_file.path)
        out.success(f"  + {init_file.path}")

    for directory in USER_DATA_DIRS:
        gitkeep = target_root / directory / GITKEEP
        if not gitkeep.exists():
            create_file(gitkeep, "")

    _log.info(
        "init_complete",
        target=target_root.as_posix(),
        integrated=integrated,
        copied=len(files.copied),
        unchanged=len(files.unchanged),
        errors=len(files.errors),
    )

    out.info("")
    out.success("2ndBrain framework integrated!" if integrated else "2ndBrain project initialized!")
    out.info(f"  Created: {len(files.copied)} files")
    if files.unchanged:
        out.info(f"  Skipped: {len(files.unchanged)} existing files")
    if files.errors:
        out.error(f"  Errors: {len(files.errors)} files")
    out.info("")
    out.info("Next steps:")
    for index, step in enumerate(NEXT_STEPS, start=1):
        out.info(f"  {index}. {step}")
    return report


def _announce_integration(target_root: Path, out: LineLogger) -> None:
    top_level = {entry.name for entry in target_root.iterdir() if entry.is_dir()}
    user_dirs = [name for name in USER_DATA_DIRS if name in top_level]
    framework_dirs = sorted(
        {directory.split("/", 1)[0] for directory in FRAMEWORK_DIRS} & top_level
    )

    out.info("")
    out.info("Integration mode: Merging 2ndBrain framework into existing vault")
    if user_dirs:
        out.info(f"Found existing user data: {', '.join(user_dirs)}")
    if framework_dirs:
        out.warn(f"Found existing framework dirs: {', '.join(framework_dirs)}")
    out.info("")


def _reset_config(
    config_template: Path,
    config_target: Path,
    out: LineLogger,
    *,
    asker: Asker | None,
    force: bool,
) -> str:
    if not config_target.exists():
        out.info(f"  No existing {CONFIG_DIR} found, creating from template...")
        copy_config_dir(config_template, config_target)
        out.success(f"  + {CONFIG_DIR}/")
        return "copied"

    for line in _RESET_BANNER:
        out.warn(line)

    if force:
        out.warn("  Force reset: skipping confirmation (--force)")
    elif asker is None:
        raise ConfirmationRequiredError(f"{CONFIG_DIR} reset", "--force")
    elif not confirm(asker, f"Are you sure you want to reset your {CONFIG_DIR} directory?", False):
        out.info("")
        out.info("Obsidian reset cancelled. Preserving existing configuration.")
        return "kept"

    out.info(f"  Resetting {CONFIG_DIR} directory...")
    reset_config_dir(config_template, config_target)
    out.success(f"  {CONFIG_DIR}/ reset complete")
    out.info("    • All settings replaced with template defaults")
    _log.info("config_reset", target=config_target.as_posix())
    return "reset"


__all__ = ["GITKEEP", "InitReport", "NEXT_STEPS", "init"]
