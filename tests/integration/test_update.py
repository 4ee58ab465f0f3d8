"""
secondbrain — integration tests for ``update``

File: tests/integration/test_update.py

Purpose
- Dry-run purity, batch confirmation paths, idempotent re-runs, config merge
  and member dashboard refresh against a real vault on disk.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from secondbrain.commands import init, member, update
from secondbrain.commands._shared import print_text_diff
from secondbrain.errors import ConfirmationRequiredError, NotAProjectError
from secondbrain.reconcile.classifier import LARGE_FILE_THRESHOLD
from secondbrain.reconcile.confirm import BatchChoice, ScriptedAsker
from secondbrain.utils.hashing import snapshot_tree

pytestmark = pytest.mark.integration


@pytest.fixture()
def project(template_root: Path, vault: Path) -> Path:
    init(vault, template_root)
    return vault


def _append(path: Path, text: str) -> None:
    with path.open("a", encoding="utf-8") as handle:
        handle.write(text)


def test_update_requires_project(template_root: Path, vault: Path) -> None:
    vault.mkdir()

    with pytest.raises(NotAProjectError, match='Run "2ndbrain init" first.'):
        update(vault, template_root, yes=True)


def test_non_interactive_update_needs_yes(template_root: Path, project: Path) -> None:
    with pytest.raises(ConfirmationRequiredError, match="--yes"):
        update(project, template_root)


def test_up_to_date_vault_reports_nothing_to_do(template_root: Path, project: Path) -> None:
    log = ScriptedAsker()
    before = snapshot_tree(project)

    report = update(project, template_root, yes=True, log=log)

    assert report.files.changes == []
    assert report.confirmation is None
    assert "All framework files are already up to date!" in log.transcript
    assert report.config is not None
    assert report.config.added == []
    assert snapshot_tree(project) == before


def test_dry_run_reports_changes_and_writes_nothing(template_root: Path, project: Path) -> None:
    _append(template_root / "AGENTS.md", "\nNew rule.\n")
    (project / ".obsidian" / "community-plugins.json").write_text('["calendar"]', encoding="utf-8")
    log = ScriptedAsker()
    before = snapshot_tree(project)

    report = update(project, template_root, dry_run=True, log=log)

    assert snapshot_tree(project) == before
    assert report.files.skipped == ["AGENTS.md"]
    assert "  * AGENTS.md (+2 lines)" in log.transcript
    assert "[DRY RUN] No files will be modified." in log.transcript
    assert report.config is not None
    assert report.config.outcome_for("community-plugins.json").action.value == "merged"


def test_apply_all_updates_changed_files(template_root: Path, project: Path) -> None:
    _append(template_root / "AGENTS.md", "\nNew rule.\n")
    (template_root / "README.md").write_text("# Rewritten\n", encoding="utf-8")
    asker = ScriptedAsker([BatchChoice.APPLY_ALL.value])

    report = update(project, template_root, asker=asker, log=asker)

    assert report.confirmation is not None
    assert report.confirmation.applied == ["AGENTS.md", "README.md"]
    assert (project / "README.md").read_text(encoding="utf-8") == "# Rewritten\n"
    assert "  ↻ AGENTS.md" in asker.transcript
    assert report.error_count == 0


def test_review_mode_applies_only_accepted_files(template_root: Path, project: Path) -> None:
    _append(template_root / "AGENTS.md", "\nNew rule.\n")
    (template_root / "README.md").write_text("# Rewritten\n", encoding="utf-8")
    original_agents = (project / "AGENTS.md").read_text(encoding="utf-8")
    diffs: list[str] = []
    asker = ScriptedAsker(["2", "n", "y"])

    report = update(project, template_root, asker=asker, log=asker, diff_printer=diffs.append)

    assert report.confirmation is not None
    assert report.confirmation.declined == ["AGENTS.md"]
    assert report.confirmation.applied == ["README.md"]
    assert (project / "AGENTS.md").read_text(encoding="utf-8") == original_agents
    assert (project / "README.md").read_text(encoding="utf-8") == "# Rewritten\n"
    assert len(diffs) == 2
    assert diffs[1].startswith("--- README.md\n+++ README.md\n")


def test_abort_cancels_whole_update(template_root: Path, project: Path) -> None:
    _append(template_root / "AGENTS.md", "\nNew rule.\n")
    (template_root / ".obsidian" / "app.json").write_text('{"changed": true}', encoding="utf-8")
    before = snapshot_tree(project)
    asker = ScriptedAsker(["3"])

    report = update(project, template_root, asker=asker, log=asker)

    assert report.cancelled
    assert report.config is None
    assert "Update cancelled." in asker.transcript
    assert snapshot_tree(project) == before


def test_large_file_defaults_to_skip_under_apply_all(template_root: Path, project: Path) -> None:
    (template_root / "LICENSE").write_text("x" * (LARGE_FILE_THRESHOLD + 1), encoding="utf-8")
    original = (project / "LICENSE").read_bytes()
    asker = ScriptedAsker(["1", ""])

    report = update(project, template_root, asker=asker, log=asker)

    assert report.confirmation is not None
    assert report.confirmation.declined == ["LICENSE"]
    assert (project / "LICENSE").read_bytes() == original
    assert "Update this file anyway? [y/N]: " in asker.prompts


def test_second_run_is_a_no_op(template_root: Path, project: Path) -> None:
    _append(template_root / "CLAUDE.md", "\nmore\n")
    update(project, template_root, yes=True)
    after_first = snapshot_tree(project)

    report = update(project, template_root, yes=True)

    assert report.files.changes == []
    assert snapshot_tree(project) == after_first


def test_config_merge_keeps_user_settings(template_root: Path, project: Path) -> None:
    config = project / ".obsidian"
    (config / "community-plugins.json").write_text('["calendar"]', encoding="utf-8")
    (config / "plugins" / "dataview" / "data.json").write_text('{"mine": 1}', encoding="utf-8")
    (config / "workspace.json").write_text("{}", encoding="utf-8")

    report = update(project, template_root, yes=True)

    assert json.loads((config / "community-plugins.json").read_text(encoding="utf-8")) == [
        "calendar",
        "dataview",
        "obsidian-tasks-plugin",
    ]
    assert (config / "plugins" / "dataview" / "data.json").read_text(encoding="utf-8") == (
        '{"mine": 1}'
    )
    assert report.config is not None
    assert report.config.outcome_for("workspace.json").reason == "user-only"


def test_member_dashboards_follow_template(template_root: Path, project: Path) -> None:
    member("alice", project)
    _append(template_root / "99_System" / "Templates" / "tpl_member_tasks.md", "\n<!-- v2 -->\n")

    preview = update(project, template_root, dry_run=True)
    assert [change.file for change in preview.members.changes] == ["10_Inbox/alice/01_Tasks.md"]

    report = update(project, template_root, yes=True)

    assert report.member_confirmation is not None
    assert report.member_confirmation.applied == ["10_Inbox/alice/01_Tasks.md"]
    dashboard = (project / "10_Inbox" / "alice" / "01_Tasks.md").read_text(encoding="utf-8")
    assert dashboard.startswith("# alice - Tasks")
    assert dashboard.endswith("<!-- v2 -->\n")
    assert report.members.unchanged == ["10_Inbox/alice/09_Done.md"]


def test_review_of_undecodable_new_file_uses_binary_prompt(
    template_root: Path, project: Path
) -> None:
    (template_root / "LICENSE").write_bytes(b"Copyright \xa9 2024 caf\xe9\n")
    (project / "LICENSE").unlink()
    asker = ScriptedAsker([BatchChoice.REVIEW.value, "y"])

    report = update(project, template_root, asker=asker)

    assert [change.kind.value for change in report.files.changes] == ["binary"]
    assert report.confirmation is not None
    assert report.confirmation.applied == ["LICENSE"]
    assert "Update this file anyway? [y/N]: " in asker.prompts
    assert (project / "LICENSE").read_bytes() == b"Copyright \xa9 2024 caf\xe9\n"
    assert report.error_count == 0


def test_text_diff_tolerates_undecodable_content(tmp_path: Path) -> None:
    current = tmp_path / "notes.md"
    current.write_bytes(b"caf\xe9\n")
    printed: list[str] = []

    print_text_diff(current, "cafe\n", "notes.md", printed.append)
    print_text_diff(tmp_path / "absent.md", None, "absent.md", printed.append)

    assert printed == [
        "(no text diff for notes.md: content is not UTF-8)",
        "(no text diff for absent.md: content is not UTF-8)",
    ]


def test_failed_config_write_counts_as_error(template_root: Path, project: Path) -> None:
    config = project / ".obsidian"
    (config / "app.json").unlink()
    (config / "app.json").mkdir()
    (template_root / ".obsidian" / "app.json").write_text('{"changed": true}', encoding="utf-8")
    log = ScriptedAsker()

    report = update(project, template_root, yes=True, log=log)

    assert report.config is not None
    assert [outcome.path for outcome in report.config.errors] == ["app.json"]
    assert report.error_count == 1
    assert report.to_dict()["error_count"] == 1
    assert any(line.startswith("  ! app.json (error: ") for line in log.transcript)


def test_missing_template_files_are_not_reported_as_up_to_date(
    template_root: Path, project: Path
) -> None:
    (template_root / "README.md").unlink()
    log = ScriptedAsker()

    report = update(project, template_root, yes=True, log=log)

    assert report.files.errors == ["README.md: source not found"]
    assert "All framework files are already up to date!" not in log.transcript
    assert "No framework files to update; 1 could not be checked." in log.transcript
    assert report.error_count == 1
