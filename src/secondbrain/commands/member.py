"""Create a member's personal inbox directory and dashboards."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from secondbrain.commands._shared import render_member_file, require_project, resolve_log
from secondbrain.errors import InvalidMemberNameError, MemberExistsError
from secondbrain.layout import (
    CONFIG_DIR,
    DAILY_NOTES_FILE,
    INBOX_DIR,
    MEMBER_FILES,
    MEMBER_TEMPLATE_DIR,
)
from secondbrain.reconcile.confirm import LineLogger
from secondbrain.reconcile.files import create_file, is_dir_empty
from secondbrain.utils.fs import PathLike, is_within

_log = structlog.get_logger(__name__)

NOT_A_PROJECT_HINT = 'Run "2ndbrain init" first.'
DAILY_NOTE_TEMPLATE = "99_System/Templates/tpl_daily_note"


@dataclass(slots=True)
class MemberReport:
    name: str
    target: Path
    member_dir: str
    created: list[str] = field(default_factory=list)
    missing_templates: list[str] = field(default_factory=list)
    daily_notes_configured: bool = False
    overwritten: bool = False

    @property
    def error_count(self) -> int:
        return len(self.missing_templates)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "target": self.target.as_posix(),
            "member_dir": self.member_dir,
            "created": list(self.created),
            "missing_templates": list(self.missing_templates),
            "daily_notes_configured": self.daily_notes_configured,
            "overwritten": self.overwritten,
            "error_count": self.error_count,
        }


def daily_notes_config(member_dir: str) -> str:
    """Obsidian daily-notes settings pointing new notes at ``member_dir``."""

    return json.dumps(
        {"folder": member_dir, "autorun": True, "template": DAILY_NOTE_TEMPLATE},
        indent=2,
    )


def validate_member_name(name: str, inbox: Path) -> str:
    cleaned = name.strip()
    if not cleaned or cleaned in {".", ".."} or "/" in cleaned or "\\" in cleaned:
        raise InvalidMemberNameError(name)
    if cleaned.startswith("."):
        raise InvalidMemberNameError(name)
    if inbox.is_dir() and not is_within(inbox / cleaned, inbox):
        raise InvalidMemberNameError(name)
    return cleaned


def member(
    name: str,
    target: PathLike,
    *,
    force: bool = False,
    configure_daily_notes: bool = True,
    log: LineLogger | None = None,
) -> MemberReport:
    """Create ``10_Inbox/<name>`` with dashboards rendered from the vault's templates."""

    out = resolve_log(log)
    target_root = Path(target).expanduser().resolve()
    inbox = target_root / INBOX_DIR
    member_name = validate_member_name(name, inbox)
    member_rel = f"{INBOX_DIR}/{member_name}"
    member_dir = target_root / member_rel

    out.info("")
    out.info("2ndBrain Member Init")
    out.info("========================")
    out.info(f"Member name: {member_name}")
    out.info(f"Member directory: {member_rel}")
    out.info("")

    target_root = require_project(target_root, hint=NOT_A_PROJECT_HINT)
    report = MemberReport(name=member_name, target=target_root, member_dir=member_rel)

    if member_dir.exists() and not is_dir_empty(member_dir):
        if not force:
            raise MemberExistsError(member_rel)
        out.warn("Overwriting existing member directory...")
        report.overwritten = True

    out.info("Creating member directory...")
    member_dir.mkdir(parents=True, exist_ok=True)
    out.success(f"  + {member_rel}/")

    out.info("Creating member files...")
    template_dir = target_root / MEMBER_TEMPLATE_DIR
    for member_file in MEMBER_FILES:
        template_file = template_dir / member_file.template
        if not template_file.is_file():
            out.error(f"  ! {member_file.template} (template not found)")
            report.missing_templates.append(member_file.template)
            continue
        create_file(member_dir / member_file.output, render_member_file(template_file, member_name))
        relative = f"{member_rel}/{member_file.output}"
        report.created.append(relative)
        out.success(f"  + {relative}")

    if configure_daily_notes:
        out.info("Configuring Obsidian daily-notes...")
        create_file(target_root / CONFIG_DIR / DAILY_NOTES_FILE, daily_notes_config(member_rel))
        report.daily_notes_configured = True
        out.success(f"  + {CONFIG_DIR}/{DAILY_NOTES_FILE}")

    _log.info(
        "member_created",
        member=member_name,
        created=len(report.created),
        missing_templates=len(report.missing_templates),
    )

    out.info("")
    out.info("========================")
    out.success("Member init complete!")
    out.info("")
    out.info("Created files:")
    out.info(f"  - {member_rel}/01_Tasks.md (personal dashboard)")
    out.info(f"  - {member_rel}/09_Done.md (done records)")
    out.info("")
    out.info("Next steps:")
    out.info("  1. Open this vault with Obsidian")
    out.info(f"  2. New daily notes will auto-save to {member_rel}/")
    out.info("  3. Start recording your first task!")
    out.info("")
    return report


__all__ = [
    "DAILY_NOTE_TEMPLATE",
    "MemberReport",
    "daily_notes_config",
    "member",
    "validate_member_name",
]
