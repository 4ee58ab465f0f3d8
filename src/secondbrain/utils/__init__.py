"""Utility exports for filesystem and hashing helpers."""

from secondbrain.utils.fs import atomic_write, copy_file, is_within, safe_delete
from secondbrain.utils.hashing import files_identical, sha256_bytes, sha256_file, snapshot_tree

__all__ = [
    "atomic_write",
    "copy_file",
    "files_identical",
    "is_within",
    "safe_delete",
    "sha256_bytes",
    "sha256_file",
    "snapshot_tree",
]
