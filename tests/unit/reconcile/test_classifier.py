"""Unit tests for binary/size classification."""

from __future__ import annotations

from pathlib import Path

import pytest

from secondbrain.reconcile.classifier import (
    LARGE_FILE_THRESHOLD,
    classify,
    classify_pair,
    is_binary_path,
    is_large_file,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("logo.png", True),
        ("LOGO.PNG", True),
        ("font.woff2", True),
        ("design.sketch", True),
        ("archive.tar.gz", True),
        ("notes.md", False),
        ("data.json", False),
        ("Makefile", False),
    ],
)
def test_binary_detection_uses_extension_only(name: str, expected: bool) -> None:
    assert is_binary_path(name) is expected


def test_large_threshold_is_strictly_greater(tmp_path: Path) -> None:
    at_limit = tmp_path / "at.md"
    over_limit = tmp_path / "over.md"
    at_limit.write_bytes(b"a" * LARGE_FILE_THRESHOLD)
    over_limit.write_bytes(b"a" * (LARGE_FILE_THRESHOLD + 1))

    assert not is_large_file(at_limit)
    assert is_large_file(over_limit)
    assert not is_large_file(tmp_path / "missing.md")


def test_binary_takes_priority_over_size() -> None:
    result = classify("image.png", LARGE_FILE_THRESHOLD * 4)

    assert result.binary
    assert not result.large
    assert not result.diffable


def test_either_side_large_makes_pair_large(tmp_path: Path) -> None:
    src = tmp_path / "src.md"
    dest = tmp_path / "dest.md"
    src.write_text("small\n", encoding="utf-8")
    dest.write_bytes(b"x" * (LARGE_FILE_THRESHOLD + 10))

    assert classify_pair(src, dest).large
    assert classify_pair(src, tmp_path / "absent.md").diffable
