"""
secondbrain — hashing utilities

File: src/secondbrain/utils/hashing.py

Purpose
- Deterministic SHA-256 helpers for byte-level content comparison.
- Tree snapshots (relative path -> digest) used to prove a pass left a vault untouched.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

PathLike = str | os.PathLike[str]

_FILE_READ_CHUNK_BYTES = 1024 * 1024

__all__ = [
    "files_identical",
    "sha256_bytes",
    "sha256_file",
    "snapshot_tree",
]


def sha256_bytes(data: bytes) -> str:
    """Return SHA-256 hex digest for raw bytes."""

    return hashlib.sha256(data).hexdigest()


def sha256_file(path: PathLike, *, chunk_size: int = _FILE_READ_CHUNK_BYTES) -> str:
    """Return SHA-256 hex digest for a file read in chunks."""

    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    digest = hashlib.sha256()
    with Path(path).open("rb") as file_handle:
        while True:
            chunk = file_handle.read(chunk_size)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def files_identical(left: PathLike, right: PathLike) -> bool:
    """Byte-level equality check; sizes are compared first."""

    left_path = Path(left)
    right_path = Path(right)
    if left_path.stat().st_size != right_path.stat().st_size:
        return False
    return sha256_file(left_path) == sha256_file(right_path)


def snapshot_tree(directory: PathLike) -> dict[str, str]:
    """
    Build a deterministic snapshot of every regular file under ``directory``.

    Keys are relative POSIX paths, values lowercase SHA-256 digests. A missing
    directory yields an empty snapshot.
    """

    root = Path(directory)
    if not root.is_dir():
        return {}

    snapshot: dict[str, str] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            file_path = Path(dirpath) / filename
            if not file_path.is_file():
                continue
            snapshot[file_path.relative_to(root).as_posix()] = sha256_file(file_path)
    return dict(sorted(snapshot.items()))
