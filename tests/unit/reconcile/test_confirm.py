"""Unit tests for prompts and the change-batch confirmation controller."""

from __future__ import annotations

import pytest

from secondbrain.domain.models import FileChange, ReconciliationKind
from secondbrain.reconcile.confirm import (
    BATCH_OPTIONS,
    BatchChoice,
    ConfirmationController,
    ControllerState,
    Option,
    ScriptedAsker,
    confirm,
    describe_change,
    select,
)

pytestmark = pytest.mark.unit


def _text(name: str, added: int = 1, removed: int = 0) -> FileChange:
    return FileChange(file=name, kind=ReconciliationKind.CHANGED, added=added, removed=removed)


def _binary(name: str) -> FileChange:
    return FileChange(file=name, kind=ReconciliationKind.BINARY, size_bytes=2048)


def _large(name: str) -> FileChange:
    return FileChange(file=name, kind=ReconciliationKind.LARGE, size_bytes=2 * 1024 * 1024)


class _Recorder:
    def __init__(self, fail: set[str] | None = None) -> None:
        self.applied: list[str] = []
        self._fail = fail or set()

    def __call__(self, change: FileChange) -> None:
        if change.file in self._fail:
            raise PermissionError(f"denied: {change.file}")
        self.applied.append(change.file)


@pytest.mark.parametrize(
    ("answer", "default", "expected"),
    [
        ("", True, True),
        ("", False, False),
        ("y", False, True),
        ("YES", False, True),
        ("n", True, False),
        ("maybe", True, False),
    ],
)
def test_confirm_answers(answer: str, default: bool, expected: bool) -> None:
    asker = ScriptedAsker([answer])

    assert confirm(asker, "Proceed?", default) is expected
    assert asker.prompts[0].endswith("[Y/n]: " if default else "[y/N]: ")


def test_select_by_number_value_and_default() -> None:
    options = (Option("One", "a"), Option("Two", "b"))

    assert select(ScriptedAsker(["2"]), "Pick", options) == "b"
    assert select(ScriptedAsker(["a"]), "Pick", options) == "a"
    assert select(ScriptedAsker([""]), "Pick", options, default="b") == "b"


def test_select_invalid_choice_falls_back_to_first() -> None:
    asker = ScriptedAsker(["42"])

    assert select(asker, "Pick", (Option("One", "a"), Option("Two", "b")), default="b") == "a"
    assert "Invalid choice, using default (1)." in asker.transcript


def test_select_marks_default_option() -> None:
    asker = ScriptedAsker([""])

    select(asker, "How?", BATCH_OPTIONS, default=BatchChoice.APPLY_ALL)

    assert any("Apply all changes (default)" in line for line in asker.transcript)


def test_select_requires_options() -> None:
    with pytest.raises(ValueError):
        select(ScriptedAsker(), "Pick", ())


def test_describe_change() -> None:
    assert describe_change(_text("a.md", 3, 2)) == "(+3 -2 lines)"
    assert describe_change(_text("a.md", 0, 0)) == "(no line changes)"
    assert describe_change(_binary("logo.png")) == "(binary file)"
    assert describe_change(_large("big.md")) == "(large file, use --force to review)"


def test_apply_all_commits_text_changes_in_order() -> None:
    asker = ScriptedAsker(["1"])
    apply = _Recorder()
    controller = ConfirmationController(asker, asker)

    result = controller.run([_text("a.md"), _text("b.md")], apply)

    assert result.choice is BatchChoice.APPLY_ALL
    assert apply.applied == ["a.md", "b.md"]
    assert result.applied == ["a.md", "b.md"]
    assert controller.state is ControllerState.DONE
    assert "  ↻ a.md" in asker.transcript


def test_apply_all_still_asks_for_binary_and_defaults_to_no() -> None:
    asker = ScriptedAsker(["1", "", "y"])
    apply = _Recorder()

    result = ConfirmationController(asker, asker).run(
        [_binary("logo.png"), _large("big.md"), _text("c.md")], apply
    )

    assert result.declined == ["logo.png"]
    assert result.applied == ["big.md", "c.md"]
    assert asker.prompts.count("Update this file anyway? [y/N]: ") == 2
    assert "  ~ logo.png (skipped)" in asker.transcript


def test_review_asks_per_file_and_shows_diff() -> None:
    asker = ScriptedAsker(["2", "n", ""])
    shown: list[str] = []
    apply = _Recorder()

    result = ConfirmationController(
        asker, asker, show_diff=lambda change: shown.append(change.file)
    ).run([_text("a.md"), _text("b.md")], apply)

    assert result.choice is BatchChoice.REVIEW
    assert shown == ["a.md", "b.md"]
    assert result.declined == ["a.md"]
    assert result.applied == ["b.md"]
    assert "Update a.md? [Y/n]: " in asker.prompts


def test_abort_applies_nothing() -> None:
    asker = ScriptedAsker(["3"])
    apply = _Recorder()

    result = ConfirmationController(asker, asker).run([_text("a.md")], apply)

    assert result.aborted
    assert apply.applied == []
    assert result.declined == []


def test_auto_yes_never_prompts() -> None:
    asker = ScriptedAsker()
    apply = _Recorder()

    result = ConfirmationController(asker, asker).run(
        [_binary("logo.png"), _text("a.md")], apply, auto_yes=True
    )

    assert asker.prompts == []
    assert result.applied == ["logo.png", "a.md"]


def test_empty_batch_aborts_without_prompting() -> None:
    asker = ScriptedAsker(["1"])
    apply = _Recorder()

    result = ConfirmationController(asker, asker).run([], apply)

    assert result.aborted
    assert asker.prompts == []
    assert asker.remaining == 1


def test_apply_failure_is_recorded_and_batch_continues() -> None:
    asker = ScriptedAsker(["1"])
    apply = _Recorder(fail={"a.md"})

    result = ConfirmationController(asker, asker).run([_text("a.md"), _text("b.md")], apply)

    assert result.failed == ["a.md"]
    assert result.applied == ["b.md"]
    assert any(line.startswith("  ! a.md (error:") for line in asker.transcript)


def test_batch_choice_only_once() -> None:
    asker = ScriptedAsker(["3"])
    controller = ConfirmationController(asker, asker)
    controller.choose_batch([_text("a.md")])

    with pytest.raises(RuntimeError):
        controller.choose_batch([_text("a.md")])
