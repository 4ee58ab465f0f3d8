"""
secondbrain — filesystem utilities

File: src/secondbrain/utils/fs.py

Purpose
- Provide the small set of filesystem primitives the reconciliation engine builds on:
  atomic writes, template-to-target copies, and guarded deletion inside a vault root.

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
- Copies create missing parent directories and preserve file bytes exactly.
- Deletion refuses paths outside the vault root.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = [
    "atomic_write",
    "copy_file",
    "is_within",
    "safe_delete",
]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """
    Atomically write ``data`` to ``path``, creating parent directories.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.
    """

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target_parent = target.parent.resolve(strict=True)

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        if isinstance(data, bytes):
            with os.fdopen(fd, "wb") as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())
        else:
            # newline="" keeps line endings exactly as given
            with os.fdopen(fd, "w", encoding=encoding, newline="") as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())

        os.replace(temp_path, target)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def copy_file(src: PathLike, dest: PathLike) -> None:
    """Copy ``src`` over ``dest`` byte-for-byte, creating parent directories."""

    destination = Path(dest)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, destination)


def is_within(child: PathLike, parent: PathLike) -> bool:
    """Return ``True`` if resolved ``child`` is within resolved ``parent``."""

    try:
        resolved_parent = Path(parent).resolve(strict=True)
    except FileNotFoundError:
        return False
    if not resolved_parent.is_dir():
        return False

    resolved_child = Path(child).resolve()
    return _is_relative_to(resolved_child, resolved_parent)


def safe_delete(path: PathLike, vault_root: PathLike) -> None:
    """
    Delete ``path`` only if it is contained within ``vault_root``.

    Symlinks are unlinked without traversing into their targets.
    """

    vault = Path(vault_root).resolve(strict=True)
    if not vault.is_dir():
        raise NotADirectoryError(f"{vault!s} is not a directory")

    target = Path(path)
    parent_resolved = target.parent.resolve(strict=True)
    candidate = parent_resolved / target.name
    if not _is_relative_to(candidate, vault) or candidate == vault:
        raise ValueError(f"refusing to delete path outside vault root: {target!s}")

    if target.is_symlink():
        target.unlink()
        return

    if target.is_dir():
        shutil.rmtree(target)
        return

    target.unlink()


def _is_relative_to(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
    except ValueError:
        return False
    return True
