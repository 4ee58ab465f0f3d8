"""Binary and oversized file classification.

Binary detection is purely extension-based; size is checked against a fixed
threshold on either side of a comparison. Either flag short-circuits text diffing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Final

BINARY_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        # images
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".bmp",
        ".ico",
        ".webp",
        # documents and archives
        ".pdf",
        ".zip",
        ".tar",
        ".gz",
        ".rar",
        ".7z",
        # audio / video
        ".mp3",
        ".mp4",
        ".avi",
        ".mov",
        ".wav",
        # fonts
        ".ttf",
        ".otf",
        ".woff",
        ".woff2",
        ".eot",
        # design tools
        ".psd",
        ".ai",
        ".sketch",
    }
)

LARGE_FILE_THRESHOLD: Final[int] = 100 * 1024


@dataclass(frozen=True, slots=True)
class Classification:
    binary: bool
    large: bool

    @property
    def diffable(self) -> bool:
        return not self.binary and not self.large


def is_binary_path(path: str | os.PathLike[str]) -> bool:
    return PurePath(path).suffix.lower() in BINARY_EXTENSIONS


def file_size(path: str | os.PathLike[str]) -> int | None:
    try:
        return Path(path).stat().st_size
    except OSError:
        return None


def is_large_file(path: str | os.PathLike[str]) -> bool:
    size = file_size(path)
    return size is not None and size > LARGE_FILE_THRESHOLD


def classify(
    path: str | os.PathLike[str],
    size_bytes: int | None,
    other_size_bytes: int | None = None,
) -> Classification:
    """Classify one path given the sizes of the source and (optionally) destination."""

    if is_binary_path(path):
        return Classification(binary=True, large=False)
    large = any(
        size is not None and size > LARGE_FILE_THRESHOLD for size in (size_bytes, other_size_bytes)
    )
    return Classification(binary=False, large=large)


def classify_pair(
    src: str | os.PathLike[str], dest: str | os.PathLike[str]
) -> Classification:
    """Binary if either path is binary, else large if either file exceeds the threshold."""

    if is_binary_path(src) or is_binary_path(dest):
        return Classification(binary=True, large=False)
    return classify(src, file_size(src), file_size(dest))


__all__ = [
    "BINARY_EXTENSIONS",
    "LARGE_FILE_THRESHOLD",
    "Classification",
    "classify",
    "classify_pair",
    "file_size",
    "is_binary_path",
    "is_large_file",
]
