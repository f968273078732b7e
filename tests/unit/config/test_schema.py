"""Unit tests for config schema validation and merging."""

from __future__ import annotations

import pytest

from tvc_codec.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)


def test_defaults_are_valid_and_copied() -> None:
    result = validate_config(default_config())

    assert result.is_valid
    assert result.issues == ()

    copy = default_config()
    copy["boc"]["with_index"] = True
    assert DEFAULT_CONFIG["boc"]["with_index"] is False


def test_merge_is_deep_and_leaves_inputs_untouched() -> None:
    base = default_config()
    merged = merge_config(base, {"observability": {"log_level": "DEBUG"}})

    assert merged["observability"] == {"log_level": "DEBUG", "log_dir": ""}
    assert base["observability"]["log_level"] == "WARNING"


def test_missing_and_unknown_sections_are_reported() -> None:
    payload = default_config()
    del payload["output"]  # type: ignore[misc]
    broken = {**payload, "extras": {}}

    result = validate_config(broken)

    assert not result.is_valid
    assert result.config is None
    assert {(issue.path, issue.message) for issue in result.issues} == {
        ("extras", "unknown field"),
        ("output", "missing required field"),
    }


def test_field_types_are_checked() -> None:
    broken = merge_config(
        default_config(),
        {
            "boc": {"with_crc32c": 1},
            "observability": {"log_level": "LOUD", "log_dir": 3},
        },
    )

    with pytest.raises(ConfigValidationError) as exc_info:
        assert_valid_config(broken)

    messages = {issue.path: issue.message for issue in exc_info.value.issues}
    assert messages["boc.with_crc32c"] == "expected boolean, got int"
    assert messages["observability.log_level"].startswith("invalid value 'LOUD'")
    assert messages["observability.log_dir"] == "expected string, got int"
    assert "invalid config:" in str(exc_info.value)


def test_schema_version_must_match() -> None:
    result = validate_config(merge_config(default_config(), {"meta": {"schema_version": 2}}))

    assert [issue.path for issue in result.issues] == ["meta.schema_version"]


def test_non_mapping_root_is_rejected() -> None:
    result = validate_config(["not", "a", "mapping"])

    assert result.issues[0].path == "<root>"
