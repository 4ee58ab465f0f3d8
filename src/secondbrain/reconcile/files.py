"""
secondbrain — file reconciler

File: src/secondbrain/reconcile/files.py

Purpose
- Decide, per framework file, whether the target copy is created, left alone or
  overwritten from the template, and report the decision as a typed result.
- Aggregate per-file results for a whole pass without letting one failure abort
  the others.
- Create missing framework directories and remove framework files and emptied
  directories on uninstall.

Functional requirements
- Content equality ignores line-ending style; modification times are never used.
- Binary and large files are reported without reading their contents.
- Dry-run mode never opens a file for writing, including on error paths.
- A non-empty directory is never removed.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from secondbrain.domain.models import (
    BatchResult,
    FileChange,
    ReconciliationKind,
    ReconciliationResult,
    RemovalResult,
)
from secondbrain.reconcile.classifier import classify_pair, file_size
from secondbrain.reconcile.differ import contents_equal, split_lines, summarize_changes
from secondbrain.utils.fs import atomic_write, copy_file, safe_delete

PathLike = str | os.PathLike[str]

SOURCE_NOT_FOUND = "source not found"

_log = structlog.get_logger(__name__)


def _read_text(path: Path) -> str | None:
    """Decode ``path`` as UTF-8; ``None`` when the bytes are not text."""

    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError:
        return None


def reconcile_one(
    src: PathLike,
    dest: PathLike,
    *,
    force: bool = False,
    dry_run: bool = False,
    logger: Any | None = None,
) -> ReconciliationResult:
    """Compare one template file against its target counterpart and act on it.

    The result's ``path`` is the destination path as given. ``force`` copies even
    when contents are equal; ``dry_run`` classifies identically but never writes.
    """

    log = logger if logger is not None else _log
    source = Path(src)
    target = Path(dest)
    label = str(dest)

    if not source.is_file():
        log.debug("reconcile_source_missing", path=label)
        return ReconciliationResult(
            path=label, kind=ReconciliationKind.ERROR, message=SOURCE_NOT_FOUND
        )

    try:
        if not target.exists():
            added = 0
            kind = ReconciliationKind.CREATED
            classification = classify_pair(source, target)
            if classification.diffable:
                text = _read_text(source)
                if text is None:
                    kind = ReconciliationKind.BINARY
                else:
                    added = len(split_lines(text))
            if not dry_run:
                copy_file(source, target)
            log.debug("reconcile_created", path=label, kind=kind.value, dry_run=dry_run)
            return ReconciliationResult(
                path=label,
                kind=kind,
                added_lines=added,
                size_bytes=file_size(source),
                written=not dry_run,
            )

        classification = classify_pair(source, target)
        if classification.binary or classification.large:
            kind = ReconciliationKind.BINARY if classification.binary else ReconciliationKind.LARGE
            sizes = [size for size in (file_size(source), file_size(target)) if size is not None]
            if not dry_run:
                copy_file(source, target)
            log.debug("reconcile_opaque", path=label, kind=kind.value, dry_run=dry_run)
            return ReconciliationResult(
                path=label,
                kind=kind,
                size_bytes=max(sizes) if sizes else None,
                written=not dry_run,
            )

        new_text = _read_text(source)
        old_text = _read_text(target)
        if new_text is None or old_text is None:
            # undecodable content is handled like an extension-detected binary
            if not dry_run:
                copy_file(source, target)
            return ReconciliationResult(
                path=label,
                kind=ReconciliationKind.BINARY,
                size_bytes=file_size(source),
                written=not dry_run,
            )

        if contents_equal(old_text, new_text):
            written = force and not dry_run
            if written:
                copy_file(source, target)
            return ReconciliationResult(
                path=label, kind=ReconciliationKind.UNCHANGED, written=written
            )

        summary = summarize_changes(old_text, new_text)
        if not dry_run:
            copy_file(source, target)
        log.debug(
            "reconcile_changed",
            path=label,
            added=summary.added,
            removed=summary.removed,
            dry_run=dry_run,
        )
        return ReconciliationResult(
            path=label,
            kind=ReconciliationKind.CHANGED,
            added_lines=summary.added,
            removed_lines=summary.removed,
            written=not dry_run,
        )
    except OSError as exc:
        log.warning("reconcile_write_failed", path=label, error=str(exc))
        return ReconciliationResult(path=label, kind=ReconciliationKind.ERROR, message=str(exc))


def reconcile_many(
    files: Iterable[str],
    template_root: PathLike,
    target_root: PathLike,
    *,
    force: bool = False,
    dry_run: bool = False,
    logger: Any | None = None,
) -> BatchResult:
    """Reconcile every relative path in ``files``, in order, isolating failures.

    Results carry relative paths. In dry-run mode would-be changes land in
    ``skipped`` while ``changes`` still describes them for preview.
    """

    batch = BatchResult()
    for relative in files:
        outcome = reconcile_one(
            Path(template_root) / relative,
            Path(target_root) / relative,
            force=force,
            dry_run=dry_run,
            logger=logger,
        )
        result = ReconciliationResult(
            path=relative,
            kind=outcome.kind,
            added_lines=outcome.added_lines,
            removed_lines=outcome.removed_lines,
            size_bytes=outcome.size_bytes,
            message=outcome.message,
            written=outcome.written,
        )
        batch.results.append(result)

        if result.kind is ReconciliationKind.ERROR:
            batch.errors.append(f"{relative}: {result.message}")
            continue
        if result.kind is ReconciliationKind.UNCHANGED:
            if result.written:
                batch.copied.append(relative)
            else:
                batch.unchanged.append(relative)
            continue

        batch.changes.append(FileChange.from_result(result))
        if dry_run:
            batch.skipped.append(relative)
        else:
            batch.copied.append(relative)

    return batch


def ensure_dirs(
    dirs: Iterable[str], target_root: PathLike, *, dry_run: bool = False
) -> list[str]:
    """Create the directories absent from ``target_root``; return those created."""

    created: list[str] = []
    for relative in dirs:
        directory = Path(target_root) / relative
        if directory.is_dir():
            continue
        if not dry_run:
            directory.mkdir(parents=True, exist_ok=True)
        created.append(relative)
    return created


def remove_files(
    files: Iterable[str],
    target_root: PathLike,
    *,
    dry_run: bool = False,
    logger: Any | None = None,
) -> RemovalResult:
    log = logger if logger is not None else _log
    result = RemovalResult()
    for relative in files:
        path = Path(target_root) / relative
        if not (path.exists() or path.is_symlink()):
            result.skipped.append(relative)
            continue
        if dry_run:
            result.removed.append(relative)
            continue
        try:
            safe_delete(path, target_root)
        except (OSError, ValueError) as exc:
            log.warning("remove_failed", path=relative, error=str(exc))
            result.errors.append(f"{relative}: {exc}")
            continue
        result.removed.append(relative)
    return result


def _remove_if_empty(directory: Path, *, dry_run: bool, log: Any) -> bool:
    if not directory.is_dir() or not is_dir_empty(directory):
        return False
    if dry_run:
        return True
    try:
        directory.rmdir()
    except OSError as exc:
        log.warning("remove_dir_failed", path=str(directory), error=str(exc))
        return False
    return True


def remove_empty_dirs(
    dirs: Iterable[str],
    target_root: PathLike,
    *,
    dry_run: bool = False,
    logger: Any | None = None,
) -> list[str]:
    """Remove empty directories deepest-first, then retry parents of removed ones.

    Directories still holding any entry (user files included) are left in place.
    """

    log = logger if logger is not None else _log
    root = Path(target_root)
    removed: list[str] = []

    ordered = sorted(dirs, key=lambda item: len(item.split("/")), reverse=True)
    for relative in ordered:
        if _remove_if_empty(root / relative, dry_run=dry_run, log=log):
            removed.append(relative)

    parents: list[str] = []
    for relative in removed:
        parent = relative.rsplit("/", 1)[0] if "/" in relative else ""
        if parent and parent not in parents and parent not in removed:
            parents.append(parent)

    for parent in parents:
        if _remove_if_empty(root / parent, dry_run=dry_run, log=log):
            removed.append(parent)

    return removed


def create_file(path: PathLike, content: str) -> None:
    """Write ``content`` to ``path``, creating parent directories."""

    atomic_write(path, content)


def is_dir_empty(path: PathLike) -> bool:
    """A missing directory counts as empty."""

    directory = Path(path)
    if not directory.exists():
        return True
    with os.scandir(directory) as entries:
        return next(entries, None) is None


__all__ = [
    "SOURCE_NOT_FOUND",
    "create_file",
    "ensure_dirs",
    "is_dir_empty",
    "reconcile_many",
    "reconcile_one",
    "remove_empty_dirs",
    "remove_files",
]
