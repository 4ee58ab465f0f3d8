"""Domain result types for the reconciliation engine."""

from secondbrain.domain.models import (
    BatchResult,
    FileChange,
    MergeAction,
    MergeManifest,
    MergeOutcome,
    MergeReport,
    MergeStrategy,
    ReconciliationKind,
    ReconciliationResult,
    RemovalResult,
)

__all__ = [
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
