"""
secondbrain — unit tests for the configuration-directory merger

File: tests/unit/reconcile/test_config_merge.py

Purpose
- Strategy resolution, plugin-list union, per-entry outcomes, the user-only
  post-pass and dry-run purity.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from secondbrain.domain.models import MergeAction, MergeManifest, MergeStrategy
from secondbrain.reconcile.config_merge import (
    DEFAULT_MANIFEST,
    INTERNAL_MANIFEST_REASON,
    NOT_IN_TEMPLATE_REASON,
    USER_FILE_REASON,
    USER_ONLY_REASON,
    list_entries,
    load_manifest,
    merge_config_dir,
    merge_entry,
    merge_plugin_list,
    parse_strategy,
    reset_config_dir,
    resolve_strategy,
    write_plugin_list,
)
from secondbrain.utils.hashing import snapshot_tree

pytestmark = pytest.mark.unit

_PLUGIN_ID = st.text(alphabet="abcdefghij-", min_size=1, max_size=6)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _plugins(path: Path, items: list[str]) -> Path:
    return _write(path, json.dumps(items))


def _read_plugins(path: Path) -> list[str]:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture()
def dirs(tmp_path: Path) -> tuple[Path, Path]:
    template = tmp_path / "template" / ".obsidian"
    target = tmp_path / "vault" / ".obsidian"
    template.mkdir(parents=True)
    target.mkdir(parents=True)
    return template, target


def test_parse_strategy_accepts_both_spellings() -> None:
    assert parse_strategy("arrayUnion") is MergeStrategy.ARRAY_UNION
    assert parse_strategy("ADD_ONLY") is MergeStrategy.ADD_ONLY
    assert parse_strategy("TemplateWins") is MergeStrategy.TEMPLATE_WINS
    assert parse_strategy("sometimes") is None
    assert parse_strategy(3) is None


def test_resolve_strategy_exact_then_deepest_ancestor_then_default() -> None:
    manifest = MergeManifest(
        strategies={
            "plugins": MergeStrategy.ADD_ONLY,
            "plugins/dataview": MergeStrategy.TEMPLATE_WINS,
            "app.json": MergeStrategy.ADD_ONLY,
        }
    )

    assert resolve_strategy("app.json", manifest) is MergeStrategy.ADD_ONLY
    assert resolve_strategy("plugins/dataview/data.json", manifest) is MergeStrategy.TEMPLATE_WINS
    assert resolve_strategy("plugins/tasks/data.json", manifest) is MergeStrategy.ADD_ONLY
    assert resolve_strategy("hotkeys.json", manifest) is MergeStrategy.TEMPLATE_WINS


def test_missing_or_malformed_manifest_falls_back_to_default(dirs: tuple[Path, Path]) -> None:
    template, _ = dirs

    assert load_manifest(template) is DEFAULT_MANIFEST

    _write(template / ".2ndbrain-manifest.json", "{not json")
    assert load_manifest(template) is DEFAULT_MANIFEST

    _write(template / ".2ndbrain-manifest.json", "[1, 2]")
    assert load_manifest(template) is DEFAULT_MANIFEST


def test_manifest_skips_unknown_tags(dirs: tuple[Path, Path]) -> None:
    template, _ = dirs
    _write(
        template / ".2ndbrain-manifest.json",
        json.dumps(
            {
                "version": "2.0.0",
                "strategies": {"plugins/": "addOnly", "app.json": "mystery"},
                "deprecatedPlugins": ["old-plugin", 7],
            }
        ),
    )

    manifest = load_manifest(template)

    assert dict(manifest.strategies) == {"plugins": MergeStrategy.ADD_ONLY}
    assert manifest.version == "2.0.0"
    assert manifest.deprecated_plugins == ("old-plugin",)


def test_list_entries_is_recursive_and_sorted(dirs: tuple[Path, Path]) -> None:
    template, _ = dirs
    _write(template / "plugins" / "b" / "data.json", "{}")
    _write(template / "app.json", "{}")
    _write(template / "plugins" / "a" / "main.js", "")

    assert list_entries(template) == [
        "app.json",
        "plugins/a/main.js",
        "plugins/b/data.json",
    ]
    assert list_entries(template / "missing") == []


def test_plugin_list_union_adds_template_entries(tmp_path: Path) -> None:
    target = _plugins(tmp_path / "target.json", ["calendar", "dataview"])
    template = _plugins(tmp_path / "template.json", ["dataview", "obsidian-tasks-plugin"])

    merge = merge_plugin_list(target, template)

    assert merge.action is MergeAction.MERGED
    assert merge.plugins == ("calendar", "dataview", "obsidian-tasks-plugin")
    assert merge.added == ("obsidian-tasks-plugin",)
    assert merge.removed == ()


def test_plugin_list_already_superset_is_unchanged(tmp_path: Path) -> None:
    target = _plugins(tmp_path / "target.json", ["zeta", "dataview", "alpha"])
    template = _plugins(tmp_path / "template.json", ["dataview"])

    merge = merge_plugin_list(target, template)

    assert merge.action is MergeAction.UNCHANGED
    assert merge.plugins == ("zeta", "dataview", "alpha")


def test_plugin_list_parse_failures_count_as_empty(tmp_path: Path) -> None:
    target = _write(tmp_path / "target.json", "{broken")
    template = _write(tmp_path / "template.json", '{"not": "a list"}')

    merge = merge_plugin_list(target, template)

    assert merge.action is MergeAction.UNCHANGED
    assert merge.plugins == ()


@given(
    current=st.lists(_PLUGIN_ID, max_size=8),
    template=st.lists(_PLUGIN_ID, max_size=8),
)
@settings(max_examples=150, deadline=None)
def test_plugin_union_never_drops_user_plugins(
    tmp_path_factory: pytest.TempPathFactory, current: list[str], template: list[str]
) -> None:
    root = tmp_path_factory.mktemp("union")
    merge = merge_plugin_list(
        _plugins(root / "target.json", current), _plugins(root / "template.json", template)
    )

    assert set(current) <= set(merge.plugins)
    assert set(template) <= set(merge.plugins)
    assert len(merge.plugins) == len(set(merge.plugins))
    if merge.action is MergeAction.MERGED:
        assert list(merge.plugins) == sorted(set(current) | set(template))
        assert set(merge.added) == set(template) - set(current)


def test_write_plugin_list_format(tmp_path: Path) -> None:
    path = tmp_path / "community-plugins.json"

    write_plugin_list(path, ["a", "b"])

    assert path.read_text(encoding="utf-8") == '[\n  "a",\n  "b"\n]\n'


def test_merge_entry_manifest_is_internal(dirs: tuple[Path, Path]) -> None:
    template, target = dirs
    _write(template / ".2ndbrain-manifest.json", "{}")

    outcome = merge_entry(".2ndbrain-manifest.json", template, target, DEFAULT_MANIFEST)

    assert outcome.action is MergeAction.SKIPPED
    assert outcome.reason == INTERNAL_MANIFEST_REASON
    assert not (target / ".2ndbrain-manifest.json").exists()


def test_merge_entry_add_only_preserves_existing(dirs: tuple[Path, Path]) -> None:
    template, target = dirs
    _write(template / "plugins" / "dataview" / "data.json", '{"template": true}')
    _write(target / "plugins" / "dataview" / "data.json", '{"user": true}')
    _write(template / "plugins" / "tasks" / "data.json", '{"template": true}')

    kept = merge_entry("plugins/dataview/data.json", template, target, DEFAULT_MANIFEST)
    added = merge_entry("plugins/tasks/data.json", template, target, DEFAULT_MANIFEST)

    assert kept.action is MergeAction.PRESERVED
    assert kept.reason == USER_FILE_REASON
    assert (target / "plugins" / "dataview" / "data.json").read_text(encoding="utf-8") == (
        '{"user": true}'
    )
    assert added.action is MergeAction.ADDED
    assert (target / "plugins" / "tasks" / "data.json").exists()


def test_merge_entry_template_wins(dirs: tuple[Path, Path]) -> None:
    template, target = dirs
    _write(template / "app.json", '{"a": 2}')
    _write(target / "app.json", '{"a": 1}')
    _write(template / "hotkeys.json", "{}")
    _write(target / "hotkeys.json", "{}")

    updated = merge_entry("app.json", template, target, DEFAULT_MANIFEST)
    unchanged = merge_entry("hotkeys.json", template, target, DEFAULT_MANIFEST)
    absent = merge_entry("ghost.json", template, target, DEFAULT_MANIFEST)

    assert updated.action is MergeAction.UPDATED
    assert (target / "app.json").read_text(encoding="utf-8") == '{"a": 2}'
    assert unchanged.action is MergeAction.UNCHANGED
    assert absent.action is MergeAction.SKIPPED
    assert absent.reason == NOT_IN_TEMPLATE_REASON


def test_merge_config_dir_reports_every_entry_once(dirs: tuple[Path, Path]) -> None:
    template, target = dirs
    _plugins(template / "community-plugins.json", ["dataview", "obsidian-tasks-plugin"])
    _plugins(target / "community-plugins.json", ["calendar"])
    _write(template / "app.json", '{"theme": "dark"}')
    _write(target / "workspace.json", '{"user": "layout"}')
    _write(template / "plugins" / "dataview" / "data.json", "{}")
    _write(template / ".2ndbrain-manifest.json", json.dumps({"strategies": {"plugins": "addOnly"}}))

    report = merge_config_dir(template, target)

    paths = [outcome.path for outcome in report.outcomes]
    assert len(paths) == len(set(paths))
    assert report.outcome_for("community-plugins.json").action is MergeAction.MERGED
    assert report.outcome_for("app.json").action is MergeAction.ADDED
    assert report.outcome_for("plugins/dataview/data.json").action is MergeAction.ADDED
    workspace = report.outcome_for("workspace.json")
    assert workspace.action is MergeAction.PRESERVED
    assert workspace.reason == USER_ONLY_REASON
    assert report.outcome_for(".2ndbrain-manifest.json").action is MergeAction.SKIPPED
    assert _read_plugins(target / "community-plugins.json") == [
        "calendar",
        "dataview",
        "obsidian-tasks-plugin",
    ]
    assert (target / "workspace.json").read_text(encoding="utf-8") == '{"user": "layout"}'
    assert not (target / ".2ndbrain-manifest.json").exists()


def test_merge_config_dir_dry_run_matches_live_and_writes_nothing(dirs: tuple[Path, Path]) -> None:
    template, target = dirs
    _plugins(template / "community-plugins.json", ["dataview"])
    _plugins(target / "community-plugins.json", ["calendar"])
    _write(template / "app.json", "{}")
    _write(template / "plugins" / "x" / "data.json", "{}")
    _write(target / "plugins" / "x" / "data.json", '{"mine": 1}')
    before = snapshot_tree(target)

    preview = merge_config_dir(template, target, dry_run=True)

    assert snapshot_tree(target) == before
    live = merge_config_dir(template, target)
    assert [(o.path, o.action) for o in preview.outcomes] == [
        (o.path, o.action) for o in live.outcomes
    ]


def test_dry_run_does_not_create_missing_target(tmp_path: Path) -> None:
    template = tmp_path / "template"
    _write(template / "app.json", "{}")

    report = merge_config_dir(template, tmp_path / "absent", dry_run=True)

    assert not (tmp_path / "absent").exists()
    assert report.added[0].path == "app.json"


def test_reset_config_dir_replaces_everything(dirs: tuple[Path, Path]) -> None:
    template, target = dirs
    _write(template / "app.json", '{"fresh": true}')
    _write(template / ".2ndbrain-manifest.json", "{}")
    _write(target / "workspace.json", "{}")

    reset_config_dir(template, target)

    assert sorted(list_entries(target)) == ["app.json"]
