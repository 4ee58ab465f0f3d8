"""
secondbrain — line-level content differ

File: src/secondbrain/reconcile/differ.py

Purpose
- Compute a line-granularity edit script between two texts and render it as
  unified-style diff text.
- Report exact inserted/removed line counts; they drive the "+N/-M" summaries.
- Provide the line-ending-insensitive equality check used by the reconciler.

Hunk headers are approximate (a single hunk spanning both texts); every line
of both texts is emitted with a ``+``, ``-`` or single-space prefix.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from typing import Final

NO_DIFFERENCES: Final[str] = "No differences found."


@dataclass(frozen=True, slots=True)
class ChangeSummary:
    added: int
    removed: int

    @property
    def changed(self) -> bool:
        return self.added > 0 or self.removed > 0


@dataclass(frozen=True, slots=True)
class TextDiff:
    rendered: str
    added: int
    removed: int

    @property
    def summary(self) -> ChangeSummary:
        return ChangeSummary(added=self.added, removed=self.removed)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n")


def contents_equal(left: str, right: str) -> bool:
    """Equality that ignores ``\\r\\n`` versus ``\\n`` line endings."""

    if left == right:
        return True
    return normalize_newlines(left) == normalize_newlines(right)


def split_lines(text: str) -> list[str]:
    """Split on ``\\n``; a trailing newline does not produce an extra empty line."""

    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _opcodes(old_lines: list[str], new_lines: list[str]) -> list[tuple[str, int, int, int, int]]:
    # autojunk would treat frequent lines (blank lines in markdown) as junk and
    # produce non-minimal scripts on long files
    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)
    return matcher.get_opcodes()


def summarize_changes(old: str, new: str) -> ChangeSummary:
    """Exact inserted/removed line counts for turning ``old`` into ``new``."""

    old_lines = split_lines(old)
    new_lines = split_lines(new)
    added = 0
    removed = 0
    for tag, i1, i2, j1, j2 in _opcodes(old_lines, new_lines):
        if tag in ("delete", "replace"):
            removed += i2 - i1
        if tag in ("insert", "replace"):
            added += j2 - j1
    return ChangeSummary(added=added, removed=removed)


def diff_texts(old: str, new: str, old_label: str = "old", new_label: str = "new") -> TextDiff:
    """Render the edit script from ``old`` to ``new`` and count its lines."""

    old_lines = split_lines(old)
    new_lines = split_lines(new)
    opcodes = _opcodes(old_lines, new_lines)

    body: list[str] = []
    added = 0
    removed = 0
    for tag, i1, i2, j1, j2 in opcodes:
        if tag == "equal":
            body.extend(f" {line}" for line in old_lines[i1:i2])
            continue
        if tag in ("delete", "replace"):
            body.extend(f"-{line}" for line in old_lines[i1:i2])
            removed += i2 - i1
        if tag in ("insert", "replace"):
            body.extend(f"+{line}" for line in new_lines[j1:j2])
            added += j2 - j1

    if added == 0 and removed == 0:
        return TextDiff(rendered=NO_DIFFERENCES, added=0, removed=0)

    header = [
        f"--- {old_label}",
        f"+++ {new_label}",
        f"@@ -1,{len(old_lines)} +1,{len(new_lines)} @@",
    ]
    rendered = "\n".join([*header, *body]) + "\n"
    return TextDiff(rendered=rendered, added=added, removed=removed)


__all__ = [
    "NO_DIFFERENCES",
    "ChangeSummary",
    "TextDiff",
    "contents_equal",
    "diff_texts",
    "normalize_newlines",
    "split_lines",
    "summarize_changes",
]
