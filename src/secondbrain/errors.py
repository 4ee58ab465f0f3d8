"""Operation-level errors raised to halt a whole command.

Per-file failures never raise; they are recorded in result objects instead.
"""

from __future__ import annotations

from pathlib import Path


class SecondBrainError(RuntimeError):
    """Base class for failures that abort an init/update/remove/member run."""


class NotAProjectError(SecondBrainError):
    """Target directory lacks the marker file."""

    def __init__(self, target_root: Path, *, hint: str | None = None) -> None:
        self.target_root = target_root
        message = f"target directory is not a 2ndBrain project: {target_root}"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class AlreadyAProjectError(SecondBrainError):
    """init was pointed at an existing vault without ``--force``."""

    def __init__(self, target_root: Path) -> None:
        self.target_root = target_root
        super().__init__(f"target directory is already a 2ndBrain project: {target_root}")


class ConfirmationRequiredError(SecondBrainError):
    """A destructive action was requested without its confirmation flag."""

    def __init__(self, action: str, flag: str) -> None:
        self.action = action
        self.flag = flag
        super().__init__(f"aborted: {action} requires {flag}")


class TemplateNotFoundError(SecondBrainError):
    """Template root or a required template file is missing."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"template not found: {path}")


class InvalidMemberNameError(SecondBrainError):
    """Member name would escape the inbox directory or is otherwise unusable."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"invalid member name: {name!r}")


class MemberExistsError(SecondBrainError):
    """Member directory already holds files and ``--force`` was not given."""

    def __init__(self, member_dir: str) -> None:
        self.member_dir = member_dir
        super().__init__(f"member directory {member_dir} already exists; use --force to overwrite")


__all__ = [
    "AlreadyAProjectError",
    "ConfirmationRequiredError",
    "InvalidMemberNameError",
    "MemberExistsError",
    "NotAProjectError",
    "SecondBrainError",
    "TemplateNotFoundError",
]
