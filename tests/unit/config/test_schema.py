"""Unit tests for config schema validation and merging."""

from __future__ import annotations

import pytest

from secondbrain.config.schema import (
    CONFIG_SCHEMA_VERSION,
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)

pytestmark = pytest.mark.unit


def test_defaults_are_valid_and_copied() -> None:
    first = default_config()
    first["output"]["color"] = False

    assert default_config()["output"]["color"] is True
    assert validate_config(default_config()).is_valid


def test_issue_paths_are_deterministic() -> None:
    result = validate_config(
        {
            "output": {"color": "yes", "extra": 1},
            "logging": {"level": "LOUD"},
            "bogus": {},
        }
    )

    assert not result.is_valid
    assert [issue.path for issue in result.issues] == [
        "bogus",
        "output.extra",
        "output.color",
        "logging.level",
    ]


def test_level_is_upper_cased() -> None:
    config = assert_valid_config({"logging": {"level": " debug "}})

    assert config["logging"]["level"] == "DEBUG"


def test_schema_version_mismatch_carries_guidance() -> None:
    with pytest.raises(ConfigValidationError) as excinfo:
        assert_valid_config({"meta": {"schema_version": CONFIG_SCHEMA_VERSION + 1}})

    assert "newer than supported" in str(excinfo.value)
    assert "older than supported" in migration_guidance(0)


def test_path_fields_reject_nul_and_non_strings() -> None:
    result = validate_config({"template": {"root": "a\x00b"}, "logging": {"log_file": 3}})

    assert [issue.path for issue in result.issues] == ["template.root", "logging.log_file"]


def test_non_mapping_root() -> None:
    result = validate_config(["not", "a", "table"])

    assert result.config is None
    assert result.issues[0].path == "<root>"


def test_merge_config_is_deep_and_non_mutating() -> None:
    base = {"output": {"color": True, "verbose": False}}
    overlay = {"output": {"verbose": True}, "logging": {"level": "INFO"}}

    merged = merge_config(base, overlay)

    assert merged == {
        "logging": {"level": "INFO"},
        "output": {"color": True, "verbose": True},
    }
    assert base == {"output": {"color": True, "verbose": False}}
