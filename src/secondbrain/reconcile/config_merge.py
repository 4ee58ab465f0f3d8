"""
secondbrain — configuration-directory merger

File: src/secondbrain/reconcile/config_merge.py

Purpose
- Merge the template's editor configuration directory into a vault entry by
  entry, applying the strategy a sidecar manifest declares for each path.
- Union-merge the community plugin list instead of replacing it.
- Report every entry, including files only the user has, as a typed outcome.

Functional requirements
- The merger never deletes anything in the target directory.
- The manifest file itself is never copied into the target.
- Manifest or plugin-list parse failures substitute defaults; they never abort.
- Dry-run produces the same outcomes as a live run with zero writes.
"""

from __future__ import annotations

import json
import os
import re
import shutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import structlog

from secondbrain.domain.models import (
    MERGE_ERROR_PREFIX,
    MergeAction,
    MergeManifest,
    MergeOutcome,
    MergeReport,
    MergeStrategy,
)
from secondbrain.layout import MANIFEST_FILE, PLUGIN_DIR, PLUGIN_LIST_FILE
from secondbrain.utils.fs import PathLike, atomic_write, copy_file, safe_delete
from secondbrain.utils.hashing import files_identical

DEFAULT_MANIFEST: Final[MergeManifest] = MergeManifest(
    strategies={
        PLUGIN_LIST_FILE: MergeStrategy.ARRAY_UNION,
        PLUGIN_DIR: MergeStrategy.ADD_ONLY,
    },
    version="1.0.0",
    description="2ndBrain Obsidian directory merge manifest",
)

USER_ONLY_REASON: Final[str] = "user-only"
USER_FILE_REASON: Final[str] = "user file"
INTERNAL_MANIFEST_REASON: Final[str] = "internal manifest"
NOT_IN_TEMPLATE_REASON: Final[str] = "not in template"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

_log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PluginListMerge:
    """Result of the plugin-list union; ``plugins`` is what would be written."""

    action: MergeAction
    previous: tuple[str, ...]
    plugins: tuple[str, ...]
    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()


def parse_strategy(tag: object) -> MergeStrategy | None:
    """Accept ``ARRAY_UNION`` as well as ``ArrayUnion`` style tags."""

    if not isinstance(tag, str) or not tag.strip():
        return None
    normalized = _CAMEL_BOUNDARY.sub("_", tag.strip()).replace("-", "_").upper()
    try:
        return MergeStrategy(normalized)
    except ValueError:
        return None


def load_manifest(
    config_template_dir: PathLike,
    default: MergeManifest = DEFAULT_MANIFEST,
    *,
    logger: Any | None = None,
) -> MergeManifest:
    """Read the sidecar manifest; absent or malformed manifests yield ``default``."""

    log = logger if logger is not None else _log
    manifest_path = Path(config_template_dir) / MANIFEST_FILE
    try:
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.debug("manifest_fallback", path=str(manifest_path), reason=str(exc))
        return default

    if not isinstance(payload, Mapping):
        log.debug("manifest_fallback", path=str(manifest_path), reason="not an object")
        return default

    strategies: dict[str, MergeStrategy] = {}
    raw_strategies = payload.get("strategies", {})
    if isinstance(raw_strategies, Mapping):
        for raw_path, raw_tag in raw_strategies.items():
            strategy = parse_strategy(raw_tag)
            if strategy is None:
                log.warning("manifest_unknown_strategy", path=str(raw_path), tag=raw_tag)
                continue
            strategies[str(raw_path).strip("/")] = strategy

    deprecated = payload.get("deprecatedPlugins", [])
    version = payload.get("version", default.version)
    description = payload.get("description", default.description)
    return MergeManifest(
        strategies=strategies,
        version=str(version),
        description=str(description),
        deprecated_plugins=tuple(
            item for item in deprecated if isinstance(item, str)
        )
        if isinstance(deprecated, list)
        else (),
    )


def resolve_strategy(rel_path: str, manifest: MergeManifest) -> MergeStrategy:
    """Exact path, then ancestors from deepest to shallowest, then TEMPLATE_WINS."""

    strategies = manifest.strategies
    if rel_path in strategies:
        return strategies[rel_path]
    parts = rel_path.split("/")
    for depth in range(len(parts) - 1, 0, -1):
        ancestor = "/".join(parts[:depth])
        if ancestor in strategies:
            return strategies[ancestor]
    return MergeStrategy.TEMPLATE_WINS


def list_entries(root: PathLike) -> list[str]:
    """Relative POSIX paths of every file below ``root``; missing root yields ``[]``."""

    base = Path(root)
    if not base.is_dir():
        return []
    entries: list[str] = []
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames.sort()
        for filename in filenames:
            entries.append((Path(dirpath) / filename).relative_to(base).as_posix())
    return sorted(entries)


def _read_plugin_list(path: Path) -> list[str]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return []
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, str)]


def merge_plugin_list(target_file: PathLike, template_file: PathLike) -> PluginListMerge:
    """Union of template and target plugin ids, deduplicated and sorted."""

    current = _read_plugin_list(Path(target_file))
    template = _read_plugin_list(Path(template_file))

    union = list(dict.fromkeys([*template, *(item for item in current if item not in template)]))
    merged = sorted(union)

    current_set = set(current)
    merged_set = set(merged)
    changed = len(merged) != len(current) or not merged_set.issubset(current_set)
    if not changed:
        return PluginListMerge(
            action=MergeAction.UNCHANGED,
            previous=tuple(current),
            plugins=tuple(current),
        )

    return PluginListMerge(
        action=MergeAction.MERGED,
        previous=tuple(current),
        plugins=tuple(merged),
        added=tuple(item for item in merged if item not in current_set),
        removed=tuple(item for item in current if item not in merged_set),
    )


def write_plugin_list(path: PathLike, plugins: Sequence[str]) -> None:
    """Pretty-print with 2-space indentation and a trailing newline."""

    atomic_write(path, json.dumps(list(plugins), indent=2, ensure_ascii=False) + "\n")


def merge_entry(
    rel_path: str,
    template_dir: PathLike,
    target_dir: PathLike,
    manifest: MergeManifest,
    *,
    dry_run: bool = False,
) -> MergeOutcome:
    """Apply the resolved strategy to one template entry."""

    if rel_path == MANIFEST_FILE:
        return MergeOutcome(
            path=rel_path, action=MergeAction.SKIPPED, reason=INTERNAL_MANIFEST_REASON
        )

    template_file = Path(template_dir) / rel_path
    target_file = Path(target_dir) / rel_path

    if rel_path == PLUGIN_LIST_FILE:
        merge = merge_plugin_list(target_file, template_file)
        if merge.action is MergeAction.MERGED and not dry_run:
            write_plugin_list(target_file, merge.plugins)
        return MergeOutcome(
            path=rel_path,
            action=merge.action,
            strategy=MergeStrategy.ARRAY_UNION,
            added_items=merge.added,
            removed_items=merge.removed,
        )

    strategy = resolve_strategy(rel_path, manifest)

    if strategy is MergeStrategy.ADD_ONLY:
        if target_file.exists():
            return MergeOutcome(
                path=rel_path,
                action=MergeAction.PRESERVED,
                strategy=strategy,
                reason=USER_FILE_REASON,
            )
        if not dry_run:
            copy_file(template_file, target_file)
        return MergeOutcome(path=rel_path, action=MergeAction.ADDED, strategy=strategy)

    # ARRAY_UNION declared for anything but the plugin list has no array routine
    # and is handled like TEMPLATE_WINS
    if not template_file.is_file():
        return MergeOutcome(
            path=rel_path,
            action=MergeAction.SKIPPED,
            strategy=strategy,
            reason=NOT_IN_TEMPLATE_REASON,
        )
    if not target_file.exists():
        if not dry_run:
            copy_file(template_file, target_file)
        return MergeOutcome(path=rel_path, action=MergeAction.ADDED, strategy=strategy)
    if target_file.is_file() and files_identical(template_file, target_file):
        return MergeOutcome(path=rel_path, action=MergeAction.UNCHANGED, strategy=strategy)
    if not dry_run:
        copy_file(template_file, target_file)
    return MergeOutcome(path=rel_path, action=MergeAction.UPDATED, strategy=strategy)


def merge_config_dir(
    template_dir: PathLike,
    target_dir: PathLike,
    *,
    dry_run: bool = False,
    manifest: MergeManifest | None = None,
    logger: Any | None = None,
) -> MergeReport:
    """Merge every template entry, then report target-only entries as preserved."""

    log = logger if logger is not None else _log
    target = Path(target_dir)
    if not dry_run:
        target.mkdir(parents=True, exist_ok=True)

    active_manifest = manifest if manifest is not None else load_manifest(template_dir, logger=log)
    template_entries = list_entries(template_dir)
    report = MergeReport(dry_run=dry_run)

    for rel_path in template_entries:
        try:
            outcome = merge_entry(rel_path, template_dir, target, active_manifest, dry_run=dry_run)
        except OSError as exc:
            log.warning("config_merge_entry_failed", path=rel_path, error=str(exc))
            outcome = MergeOutcome(
                path=rel_path,
                action=MergeAction.SKIPPED,
                reason=f"{MERGE_ERROR_PREFIX}{exc}",
            )
        report.outcomes.append(outcome)

    known = set(template_entries)
    for rel_path in list_entries(target):
        if rel_path == MANIFEST_FILE or rel_path in known:
            continue
        report.outcomes.append(
            MergeOutcome(path=rel_path, action=MergeAction.PRESERVED, reason=USER_ONLY_REASON)
        )

    log.info("config_merge_complete", target=str(target), dry_run=dry_run, **report.counts())
    return report


def copy_config_dir(template_dir: PathLike, target_dir: PathLike) -> None:
    """Copy the whole template configuration directory, minus the manifest."""

    shutil.copytree(
        template_dir,
        target_dir,
        dirs_exist_ok=True,
        ignore=shutil.ignore_patterns(MANIFEST_FILE),
    )


def reset_config_dir(template_dir: PathLike, target_dir: PathLike) -> None:
    """Replace the target configuration directory wholesale with the template's."""

    target = Path(target_dir)
    if target.exists() or target.is_symlink():
        safe_delete(target, target.parent)
    copy_config_dir(template_dir, target)


__all__ = [
    "DEFAULT_MANIFEST",
    "INTERNAL_MANIFEST_REASON",
    "NOT_IN_TEMPLATE_REASON",
    "PluginListMerge",
    "USER_FILE_REASON",
    "USER_ONLY_REASON",
    "copy_config_dir",
    "list_entries",
    "load_manifest",
    "merge_config_dir",
    "merge_entry",
    "merge_plugin_list",
    "parse_strategy",
    "reset_config_dir",
    "resolve_strategy",
    "write_plugin_list",
]
