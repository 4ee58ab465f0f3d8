"""
secondbrain — interactive confirmation controller

File: src/secondbrain/reconcile/confirm.py

Purpose
- Present a change batch, collect the batch decision (apply all, review each,
  abort) and per-entry decisions, and apply accepted entries in order.
- Keep all terminal I/O behind a small ``Asker`` capability so scripted answers
  can drive the same flow in tests.

State machine
    AWAITING_BATCH_CHOICE -> AWAITING_FILE_CHOICE (once per entry) -> DONE

Binary and large entries are the only prompts that default to "no".
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from secondbrain.domain.models import FileChange


class Asker(Protocol):
    """Line-oriented prompt capability."""

    def ask(self, prompt: str) -> str: ...

    def say(self, line: str = "", *, style: str | None = None) -> None: ...


class LineLogger(Protocol):
    """Leveled user-visible output lines."""

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class ScriptedAsker:
    """Asker and line logger fed from a fixed list of answers.

    Prompts and output are recorded in ``transcript``; running out of answers
    behaves like pressing Enter.
    """

    def __init__(self, answers: Iterable[str] = ()) -> None:
        self._answers: deque[str] = deque(answers)
        self.prompts: list[str] = []
        self.transcript: list[str] = []

    @property
    def remaining(self) -> int:
        return len(self._answers)

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        self.transcript.append(prompt)
        return self._answers.popleft() if self._answers else ""

    def say(self, line: str = "", *, style: str | None = None) -> None:
        self.transcript.append(line)

    def info(self, message: str) -> None:
        self.transcript.append(message)

    def success(self, message: str) -> None:
        self.transcript.append(message)

    def warn(self, message: str) -> None:
        self.transcript.append(message)

    def error(self, message: str) -> None:
        self.transcript.append(message)


@dataclass(frozen=True, slots=True)
class Option:
    label: str
    value: object
    description: str | None = None


def confirm(asker: Asker, question: str, default: bool = True) -> bool:
    """Yes/no question; an empty answer returns ``default``."""

    suffix = " [Y/n]: " if default else " [y/N]: "
    answer = asker.ask(f"{question}{suffix}").strip()
    if not answer:
        return default
    return answer.lower() in {"y", "yes"}


def select(
    asker: Asker, question: str, options: Sequence[Option], default: object = None
) -> object:
    """Numbered single choice.

    Accepts the option number or its value. An empty answer returns ``default``;
    anything unrecognised falls back to the first option.
    """

    if not options:
        raise ValueError("select requires at least one option")

    asker.say()
    asker.say(question, style="cyan")
    for index, option in enumerate(options, start=1):
        marker = " (default)" if default is not None and option.value == default else ""
        label = f"{f'{index})':>3} {option.label}{marker}"
        if option.description:
            asker.say(f"  {label} - {option.description}")
        else:
            asker.say(f"  {label}")

    asker.say()
    answer = asker.ask("Your choice: ").strip()
    if not answer and default is not None:
        return default

    if answer.isdigit() and 1 <= int(answer) <= len(options):
        return options[int(answer) - 1].value
    for option in options:
        if str(option.value) == answer:
            return option.value

    asker.say("Invalid choice, using default (1).", style="yellow")
    return options[0].value


class BatchChoice(StrEnum):
    APPLY_ALL = "all"
    REVIEW = "review"
    ABORT = "skip"


class ControllerState(StrEnum):
    AWAITING_BATCH_CHOICE = "awaiting_batch_choice"
    AWAITING_FILE_CHOICE = "awaiting_file_choice"
    DONE = "done"


BATCH_OPTIONS: tuple[Option, ...] = (
    Option("Apply all changes", BatchChoice.APPLY_ALL, "Update all changed files without review"),
    Option("Review each file individually", BatchChoice.REVIEW, "Confirm each file one by one"),
    Option("Skip all changes", BatchChoice.ABORT, "Cancel the update"),
)


@dataclass(slots=True)
class ConfirmationResult:
    choice: BatchChoice
    applied: list[str] = field(default_factory=list)
    declined: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def aborted(self) -> bool:
        return self.choice is BatchChoice.ABORT

    def to_dict(self) -> dict[str, object]:
        return {
            "choice": self.choice.value,
            "applied": list(self.applied),
            "declined": list(self.declined),
            "failed": list(self.failed),
        }


def describe_change(change: FileChange) -> str:
    if change.binary:
        return "(binary file)"
    if change.large:
        return "(large file, use --force to review)"
    parts: list[str] = []
    if change.added > 0:
        parts.append(f"+{change.added}")
    if change.removed > 0:
        parts.append(f"-{change.removed}")
    return f"({' '.join(parts)} lines)" if parts else "(no line changes)"


class ConfirmationController:
    """Drives one change batch from the batch question to completion.

    ``show_diff`` renders the diff for a text entry during review; ``log`` gets
    the per-entry result lines.
    """

    def __init__(
        self,
        asker: Asker,
        log: LineLogger,
        *,
        show_diff: Callable[[FileChange], None] | None = None,
    ) -> None:
        self._asker = asker
        self._log = log
        self._show_diff = show_diff
        self.state = ControllerState.AWAITING_BATCH_CHOICE

    def choose_batch(self, changes: Sequence[FileChange]) -> BatchChoice:
        if self.state is not ControllerState.AWAITING_BATCH_CHOICE:
            raise RuntimeError(f"batch choice requested in state {self.state.value}")
        if not changes:
            self.state = ControllerState.DONE
            return BatchChoice.ABORT

        self._asker.say()
        self._log.info(f"{len(changes)} file(s) have changes:")
        for change in changes:
            self._asker.say(f"  * {change.file} {describe_change(change)}")
        self._asker.say()

        choice = select(
            self._asker,
            "How would you like to proceed?",
            BATCH_OPTIONS,
            default=BatchChoice.APPLY_ALL,
        )
        batch_choice = BatchChoice(choice)
        self.state = (
            ControllerState.DONE
            if batch_choice is BatchChoice.ABORT
            else ControllerState.AWAITING_FILE_CHOICE
        )
        return batch_choice

    def decide(self, change: FileChange, choice: BatchChoice, *, auto_yes: bool = False) -> bool:
        """Whether to commit one entry under the given batch choice."""

        if choice is BatchChoice.ABORT:
            return False
        if auto_yes:
            return True
        if change.large:
            return self._confirm_large(change)
        if change.binary:
            return self._confirm_binary(change)
        if choice is BatchChoice.APPLY_ALL:
            return True

        self._asker.say()
        self._asker.say(f"=== {change.file} ===", style="bold")
        if self._show_diff is not None:
            self._show_diff(change)
        return confirm(self._asker, f"Update {change.file}?", True)

    def run(
        self,
        changes: Sequence[FileChange],
        apply: Callable[[FileChange], None],
        *,
        auto_yes: bool = False,
    ) -> ConfirmationResult:
        if auto_yes:
            choice = BatchChoice.APPLY_ALL if changes else BatchChoice.ABORT
            self.state = (
                ControllerState.AWAITING_FILE_CHOICE if changes else ControllerState.DONE
            )
        else:
            choice = self.choose_batch(changes)

        result = ConfirmationResult(choice=choice)
        if choice is BatchChoice.ABORT:
            self.state = ControllerState.DONE
            return result

        for change in changes:
            if not self.decide(change, choice, auto_yes=auto_yes):
                self._log.warn(f"  ~ {change.file} (skipped)")
                result.declined.append(change.file)
                continue
            try:
                apply(change)
            except OSError as exc:
                self._log.error(f"  ! {change.file} (error: {exc})")
                result.failed.append(change.file)
                continue
            self._log.success(f"  ↻ {change.file}")
            result.applied.append(change.file)

        self.state = ControllerState.DONE
        return result

    def _confirm_large(self, change: FileChange) -> bool:
        size_kb = (change.size_bytes or 0) / 1024
        self._asker.say()
        self._asker.say(
            f"Warning: {change.file} is a large file ({size_kb:.2f} KB).", style="yellow"
        )
        return confirm(self._asker, "Update this file anyway?", False)

    def _confirm_binary(self, change: FileChange) -> bool:
        self._asker.say()
        self._asker.say(f"Warning: {change.file} appears to be a binary file.", style="yellow")
        self._asker.say(
            "Binary files cannot show diffs and will be completely replaced.", style="dim"
        )
        return confirm(self._asker, "Update this file anyway?", False)


__all__ = [
    "Asker",
    "BATCH_OPTIONS",
    "BatchChoice",
    "ConfirmationController",
    "ConfirmationResult",
    "ControllerState",
    "LineLogger",
    "Option",
    "ScriptedAsker",
    "confirm",
    "describe_change",
    "select",
]
