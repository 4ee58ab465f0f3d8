"""Remove framework files from a vault while leaving user data in place."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from secondbrain.commands._shared import require_project, resolve_log
from secondbrain.domain.models import RemovalResult
from secondbrain.errors import ConfirmationRequiredError
from secondbrain.layout import FRAMEWORK_DIRS, FRAMEWORK_FILES, USER_DATA_DIRS
from secondbrain.reconcile.confirm import LineLogger
from secondbrain.reconcile.files import remove_empty_dirs, remove_files
from secondbrain.utils.fs import PathLike

_log = structlog.get_logger(__name__)


@dataclass(slots=True)
class RemoveReport:
    target: Path
    dry_run: bool
    files: RemovalResult
    removed_dirs: list[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.files.errors)

    def to_dict(self) -> dict[str, object]:
        return {
            "target": self.target.as_posix(),
            "dry_run": self.dry_run,
            "files": self.files.to_dict(),
            "removed_dirs": list(self.removed_dirs),
            "error_count": self.error_count,
        }


def remove(
    target: PathLike,
    *,
    dry_run: bool = False,
    force: bool = False,
    log: LineLogger | None = None,
) -> RemoveReport:
    """Delete framework files, then framework directories left empty.

    Dry-run lists what would be removed. A live run needs ``force``.
    """

    out = resolve_log(log)
    target_root = Path(target).expanduser().resolve()
    out.info(f"Removing 2ndBrain framework from: {target_root}")
    target_root = require_project(target_root)

    if dry_run:
        out.warn("[DRY RUN] No files will be removed.")
        out.info("")
        out.info("Files that would be removed:")
        for relative in FRAMEWORK_FILES:
            out.info(f"  {relative}")
        out.info("")
        out.info("Directories that would be cleaned:")
        for directory in FRAMEWORK_DIRS:
            out.info(f"  {directory}/")
        return RemoveReport(
            target=target_root,
            dry_run=True,
            files=remove_files(FRAMEWORK_FILES, target_root, dry_run=True),
        )

    if not force:
        preserved = ", ".join(f"{directory}/" for directory in USER_DATA_DIRS)
        out.warn("This will remove all framework files.")
        out.warn(f"User data in {preserved} will be preserved.")
        out.warn("Use --force to skip this warning.")
        raise ConfirmationRequiredError("removal", "--force")

    out.info("Removing framework files...")
    files = remove_files(FRAMEWORK_FILES, target_root)
    removed = set(files.removed)
    failed = {entry.split(": ", 1)[0]: entry.split(": ", 1)[-1] for entry in files.errors}
    for relative in FRAMEWORK_FILES:
        if relative in removed:
            out.success(f"  - {relative}")
        elif relative in failed:
            out.error(f"  ! {relative} (error: {failed[relative]})")
        else:
            out.warn(f"  ~ {relative} (skipped: not found)")

    out.info("Cleaning empty directories...")
    removed_dirs = remove_empty_dirs(FRAMEWORK_DIRS, target_root)
    for directory in removed_dirs:
        out.success(f"  - {directory}/")

    _log.info(
        "remove_complete",
        target=target_root.as_posix(),
        removed=len(files.removed),
        removed_dirs=len(removed_dirs),
        errors=len(files.errors),
    )

    out.info("")
    out.success("2ndBrain framework removed successfully!")
    out.info(f"  Removed: {len(files.removed)} files, {len(removed_dirs)} directories")
    if files.skipped:
        out.warn(f"  Skipped: {len(files.skipped)} files")
    if files.errors:
        out.error(f"  Errors: {len(files.errors)} files")
    out.info("")
    out.info("User data directories have been preserved.")
    return RemoveReport(target=target_root, dry_run=False, files=files, removed_dirs=removed_dirs)


__all__ = ["RemoveReport", "remove"]
