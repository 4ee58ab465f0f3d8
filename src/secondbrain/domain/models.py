"""Result types produced by the reconciliation engine and consumed by the CLI."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

MERGE_ERROR_PREFIX = "error: "


class ReconciliationKind(StrEnum):
    CREATED = "created"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    BINARY = "binary"
    LARGE = "large"
    ERROR = "error"


class MergeStrategy(StrEnum):
    """Declarative per-entry strategy for the configuration directory."""

    ARRAY_UNION = "ARRAY_UNION"
    ADD_ONLY = "ADD_ONLY"
    TEMPLATE_WINS = "TEMPLATE_WINS"


class MergeAction(StrEnum):
    ADDED = "added"
    UPDATED = "updated"
    MERGED = "merged"
    UNCHANGED = "unchanged"
    PRESERVED = "preserved"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Outcome of comparing one file across template and target.

    Exactly one ``kind`` per file per operation. ``written`` records whether the
    target was actually modified (always ``False`` in dry-run mode).
    """

    path: str
    kind: ReconciliationKind
    added_lines: int = 0
    removed_lines: int = 0
    size_bytes: int | None = None
    message: str | None = None
    written: bool = False

    @property
    def is_change(self) -> bool:
        return self.kind in {
            ReconciliationKind.CREATED,
            ReconciliationKind.CHANGED,
            ReconciliationKind.BINARY,
            ReconciliationKind.LARGE,
        }

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"path": self.path, "kind": self.kind.value}
        if self.kind in {ReconciliationKind.CHANGED, ReconciliationKind.CREATED}:
            payload["added_lines"] = self.added_lines
            payload["removed_lines"] = self.removed_lines
        if self.size_bytes is not None:
            payload["size_bytes"] = self.size_bytes
        if self.message is not None:
            payload["message"] = self.message
        payload["written"] = self.written
        return payload


@dataclass(frozen=True, slots=True)
class FileChange:
    """One entry of a change batch awaiting confirmation."""

    file: str
    kind: ReconciliationKind
    added: int = 0
    removed: int = 0
    size_bytes: int | None = None

    @property
    def binary(self) -> bool:
        return self.kind is ReconciliationKind.BINARY

    @property
    def large(self) -> bool:
        return self.kind is ReconciliationKind.LARGE

    @classmethod
    def from_result(cls, result: ReconciliationResult) -> FileChange:
        return cls(
            file=result.path,
            kind=result.kind,
            added=result.added_lines,
            removed=result.removed_lines,
            size_bytes=result.size_bytes,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "file": self.file,
            "kind": self.kind.value,
            "added": self.added,
            "removed": self.removed,
            "size_bytes": self.size_bytes,
        }


@dataclass(slots=True)
class BatchResult:
    """Aggregate of a ``reconcile_many`` pass, in processing order."""

    copied: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    changes: list[FileChange] = field(default_factory=list)
    results: list[ReconciliationResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "copied": list(self.copied),
            "unchanged": list(self.unchanged),
            "skipped": list(self.skipped),
            "errors": list(self.errors),
            "changes": [change.to_dict() for change in self.changes],
        }


@dataclass(slots=True)
class RemovalResult:
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "removed": list(self.removed),
            "skipped": list(self.skipped),
            "errors": list(self.errors),
        }


@dataclass(frozen=True, slots=True)
class MergeManifest:
    """Strategy mapping for the configuration directory; immutable for one merge."""

    strategies: Mapping[str, MergeStrategy]
    version: str = "1.0.0"
    description: str = ""
    deprecated_plugins: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "strategies", MappingProxyType(dict(self.strategies)))
        object.__setattr__(self, "deprecated_plugins", tuple(self.deprecated_plugins))

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "description": self.description,
            "strategies": {key: value.value for key, value in sorted(self.strategies.items())},
            "deprecatedPlugins": list(self.deprecated_plugins),
        }


@dataclass(frozen=True, slots=True)
class MergeOutcome:
    """Per-entry outcome of a configuration-directory merge."""

    path: str
    action: MergeAction
    strategy: MergeStrategy | None = None
    reason: str | None = None
    added_items: tuple[str, ...] = ()
    removed_items: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"path": self.path, "action": self.action.value}
        if self.strategy is not None:
            payload["strategy"] = self.strategy.value
        if self.reason is not None:
            payload["reason"] = self.reason
        if self.action is MergeAction.MERGED:
            payload["added"] = list(self.added_items)
            payload["removed"] = list(self.removed_items)
        return payload


@dataclass(slots=True)
class MergeReport:
    """Ordered outcomes of one configuration-directory merge pass."""

    outcomes: list[MergeOutcome] = field(default_factory=list)
    dry_run: bool = False

    def by_action(self, action: MergeAction) -> list[MergeOutcome]:
        return [outcome for outcome in self.outcomes if outcome.action is action]

    def outcome_for(self, path: str) -> MergeOutcome | None:
        for outcome in self.outcomes:
            if outcome.path == path:
                return outcome
        return None

    @property
    def added(self) -> list[MergeOutcome]:
        return self.by_action(MergeAction.ADDED)

    @property
    def updated(self) -> list[MergeOutcome]:
        return self.by_action(MergeAction.UPDATED)

    @property
    def merged(self) -> list[MergeOutcome]:
        return self.by_action(MergeAction.MERGED)

    @property
    def unchanged(self) -> list[MergeOutcome]:
        return self.by_action(MergeAction.UNCHANGED)

    @property
    def preserved(self) -> list[MergeOutcome]:
        return self.by_action(MergeAction.PRESERVED)

    @property
    def skipped(self) -> list[MergeOutcome]:
        return self.by_action(MergeAction.SKIPPED)

    @property
    def errors(self) -> list[MergeOutcome]:
        """Skipped entries whose read or write failed."""

        return [
            outcome
            for outcome in self.skipped
            if outcome.reason is not None and outcome.reason.startswith(MERGE_ERROR_PREFIX)
        ]

    def counts(self) -> dict[str, int]:
        return {action.value: len(self.by_action(action)) for action in MergeAction}

    def to_dict(self) -> dict[str, object]:
        return {
            "dry_run": self.dry_run,
            "counts": self.counts(),
            "errors": [outcome.path for outcome in self.errors],
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }


__all__ = [
    "MERGE_ERROR_PREFIX",
    "BatchResult",
    "FileChange",
    "MergeAction",
    "MergeManifest",
    "MergeOutcome",
    "MergeReport",
    "MergeStrategy",
    "ReconciliationKind",
    "ReconciliationResult",
    "RemovalResult",
]
