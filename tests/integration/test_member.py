"""Integration tests for ``member``."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from secondbrain.commands import init, member
from secondbrain.commands.member import DAILY_NOTE_TEMPLATE, daily_notes_config
from secondbrain.errors import InvalidMemberNameError, MemberExistsError, NotAProjectError
from secondbrain.reconcile.confirm import ScriptedAsker

pytestmark = pytest.mark.integration


@pytest.fixture()
def project(template_root: Path, vault: Path) -> Path:
    init(vault, template_root)
    return vault


def test_member_creates_dashboards_and_daily_notes(project: Path) -> None:
    log = ScriptedAsker()

    report = member("alice", project, log=log)

    tasks = (project / "10_Inbox" / "alice" / "01_Tasks.md").read_text(encoding="utf-8")
    done = (project / "10_Inbox" / "alice" / "09_Done.md").read_text(encoding="utf-8")
    assert "{{MEMBER_NAME}}" not in tasks + done
    assert "10_Inbox/alice" in tasks
    assert report.created == ["10_Inbox/alice/01_Tasks.md", "10_Inbox/alice/09_Done.md"]
    settings = json.loads(
        (project / ".obsidian" / "daily-notes.json").read_text(encoding="utf-8")
    )
    assert settings == {
        "folder": "10_Inbox/alice",
        "autorun": True,
        "template": DAILY_NOTE_TEMPLATE,
    }
    assert "Member init complete!" in log.transcript


def test_daily_notes_config_format() -> None:
    assert daily_notes_config("10_Inbox/bob") == (
        '{\n  "folder": "10_Inbox/bob",\n  "autorun": true,\n'
        '  "template": "99_System/Templates/tpl_daily_note"\n}'
    )


def test_no_config_leaves_obsidian_alone(project: Path) -> None:
    report = member("carol", project, configure_daily_notes=False)

    assert not report.daily_notes_configured
    assert not (project / ".obsidian" / "daily-notes.json").exists()


def test_existing_member_needs_force(project: Path) -> None:
    member("dave", project)
    (project / "10_Inbox" / "dave" / "01_Tasks.md").write_text("edited\n", encoding="utf-8")
    (project / "10_Inbox" / "dave" / "2026-10-18.md").write_text("note\n", encoding="utf-8")

    with pytest.raises(MemberExistsError):
        member("dave", project)
    assert (project / "10_Inbox" / "dave" / "01_Tasks.md").read_text(encoding="utf-8") == (
        "edited\n"
    )

    report = member("dave", project, force=True)

    assert report.overwritten
    assert (project / "10_Inbox" / "dave" / "01_Tasks.md").read_text(encoding="utf-8") != (
        "edited\n"
    )
    assert (project / "10_Inbox" / "dave" / "2026-10-18.md").read_text(encoding="utf-8") == (
        "note\n"
    )


def test_empty_member_dir_is_reused(project: Path) -> None:
    (project / "10_Inbox" / "erin").mkdir()

    report = member("erin", project)

    assert not report.overwritten
    assert len(report.created) == 2


def test_missing_template_is_reported_not_raised(project: Path) -> None:
    (project / "99_System" / "Templates" / "tpl_member_done.md").unlink()
    log = ScriptedAsker()

    report = member("frank", project, log=log)

    assert report.missing_templates == ["tpl_member_done.md"]
    assert report.created == ["10_Inbox/frank/01_Tasks.md"]
    assert "  ! tpl_member_done.md (template not found)" in log.transcript
    assert report.error_count == 1


@pytest.mark.parametrize("name", ["", "  ", ".", "..", "../escape", "a/b", "a\\b", ".hidden"])
def test_unsafe_names_are_rejected(project: Path, name: str) -> None:
    with pytest.raises(InvalidMemberNameError):
        member(name, project)


def test_member_requires_project(vault: Path) -> None:
    vault.mkdir()

    with pytest.raises(NotAProjectError):
        member("alice", vault)
