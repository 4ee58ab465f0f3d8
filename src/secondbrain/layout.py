"""Static vault layout: which paths the framework owns and which belong to the user."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Final

# Framework files are copied by init, reconciled by update and deleted by remove.
FRAMEWORK_FILES: Final[tuple[str, ...]] = (
    "AGENTS.md",
    "README.md",
    "CHANGELOG.md",
    "CLAUDE.md",
    "LICENSE",
    "00_Dashboard/01_All_Tasks.md",
    "00_Dashboard/09_All_Done.md",
    "99_System/Templates/tpl_daily_note.md",
    "99_System/Templates/tpl_member_tasks.md",
    "99_System/Templates/tpl_member_done.md",
    "99_System/Scripts/init_member.sh",
)

FRAMEWORK_DIRS: Final[tuple[str, ...]] = (
    "00_Dashboard",
    "10_Inbox/Agents",
    "99_System/Templates",
    "99_System/Scripts",
)

# Never touched by update or remove.
USER_DATA_DIRS: Final[tuple[str, ...]] = (
    "20_Areas",
    "30_Projects",
    "40_Resources",
    "90_Archives",
)

CONFIG_DIR: Final[str] = ".obsidian"
PLUGIN_LIST_FILE: Final[str] = "community-plugins.json"
PLUGIN_DIR: Final[str] = "plugins"
MANIFEST_FILE: Final[str] = ".2ndbrain-manifest.json"
DAILY_NOTES_FILE: Final[str] = "daily-notes.json"

MARKER_FILE: Final[str] = "AGENTS.md"

INBOX_DIR: Final[str] = "10_Inbox"
AGENTS_INBOX: Final[str] = "Agents"
MEMBER_TEMPLATE_DIR: Final[str] = "99_System/Templates"
MEMBER_PLACEHOLDER: Final[str] = "{{MEMBER_NAME}}"


@dataclass(frozen=True, slots=True)
class InitOnlyFile:
    """File created once by init when missing; never updated or removed."""

    path: str
    content: str


@dataclass(frozen=True, slots=True)
class MemberFile:
    """Member dashboard rendered from a vault template."""

    template: str
    output: str


INIT_ONLY_FILES: Final[tuple[InitOnlyFile, ...]] = (
    InitOnlyFile(path="10_Inbox/Agents/Journal.md", content="# Agent Journal\n"),
)

MEMBER_FILES: Final[tuple[MemberFile, ...]] = (
    MemberFile(template="tpl_member_tasks.md", output="01_Tasks.md"),
    MemberFile(template="tpl_member_done.md", output="09_Done.md"),
)


def default_template_root() -> Path:
    """Return the template tree shipped inside the package."""

    return Path(str(resources.files("secondbrain").joinpath("template")))


def is_project(target_root: str | os.PathLike[str]) -> bool:
    """A directory is a managed vault iff the marker file exists at its root."""

    return (Path(target_root) / MARKER_FILE).is_file()


__all__ = [
    "AGENTS_INBOX",
    "CONFIG_DIR",
    "DAILY_NOTES_FILE",
    "FRAMEWORK_DIRS",
    "FRAMEWORK_FILES",
    "INBOX_DIR",
    "INIT_ONLY_FILES",
    "InitOnlyFile",
    "MANIFEST_FILE",
    "MARKER_FILE",
    "MEMBER_FILES",
    "MEMBER_PLACEHOLDER",
    "MEMBER_TEMPLATE_DIR",
    "MemberFile",
    "PLUGIN_DIR",
    "PLUGIN_LIST_FILE",
    "USER_DATA_DIRS",
    "default_template_root",
    "is_project",
]
