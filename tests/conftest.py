"""Shared fixtures: a private copy of the bundled template and an empty vault path."""

from __future__ import annotations

import shutil
from typing import TYPE_CHECKING

import pytest

from secondbrain.layout import default_template_root

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def template_root(tmp_path: Path) -> Path:
    """Copy of the packaged template that a test may edit freely."""

    root = tmp_path / "template"
    shutil.copytree(default_template_root(), root)
    return root


@pytest.fixture()
def vault(tmp_path: Path) -> Path:
    return tmp_path / "vault"


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "SECONDBRAIN_TEMPLATE_ROOT",
        "SECONDBRAIN_OUTPUT_COLOR",
        "SECONDBRAIN_OUTPUT_VERBOSE",
        "SECONDBRAIN_LOGGING_LEVEL",
        "SECONDBRAIN_LOGGING_LOG_FILE",
        "SECONDBRAIN_META_SCHEMA_VERSION",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.chdir(tmp_path)
