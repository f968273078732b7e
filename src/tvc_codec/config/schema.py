"""
tvc-codec config schema.

Sections cover BoC container flags, CLI output format, and logging. Validation
never stops at the first problem: every issue is collected with a dotted path
so a broken ``tvc.toml`` can be fixed in one pass.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from tvc_codec.constants import CONFIG_SCHEMA_VERSION

OutputFormat = Literal["json", "yaml"]

OUTPUT_FORMATS: Final[tuple[str, ...]] = ("json", "yaml")
LOG_LEVELS: Final[tuple[str, ...]] = ("CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING")


class MetaConfig(TypedDict):
    schema_version: int


class BocConfig(TypedDict):
    with_crc32c: bool
    with_index: bool


class OutputConfig(TypedDict):
    format: OutputFormat


class ObservabilityConfig(TypedDict):
    log_level: str
    log_dir: str


class CodecConfig(TypedDict):
    meta: MetaConfig
    boc: BocConfig
    output: OutputConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[CodecConfig] = {
    "meta": {
        "schema_version": CONFIG_SCHEMA_VERSION,
    },
    "boc": {
        "with_crc32c": True,
        "with_index": False,
    },
    "output": {
        "format": "json",
    },
    "observability": {
        "log_level": "WARNING",
        "log_dir": "",
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> CodecConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = copy.deepcopy(dict(base))
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with dotted paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    _reject_unknown_keys(root, {"meta", "boc", "output", "observability"}, "", issues)
    _require_keys(root, {"meta", "boc", "output", "observability"}, "", issues)

    out: dict[str, Any] = {}
    validators: dict[str, Callable[[dict[str, object], str, _IssueCollector], dict[str, Any]]] = {
        "meta": _validate_meta,
        "boc": _validate_boc,
        "output": _validate_output,
        "observability": _validate_observability,
    }
    for key in sorted(validators):
        raw = root.get(key)
        if raw is None:
            continue
        section = _as_object(raw, key, issues)
        if section is not None:
            out[key] = validators[key](section, key, issues)

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=out, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_meta(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"schema_version"}, path, issues)
    _require_keys(payload, {"schema_version"}, path, issues)

    out: dict[str, Any] = {}
    if "schema_version" in payload:
        field_path = _join(path, "schema_version")
        parsed = _as_int(payload["schema_version"], field_path, issues, minimum=1)
        if parsed is not None:
            out["schema_version"] = parsed
            if parsed != CONFIG_SCHEMA_VERSION:
                issues.add(
                    field_path,
                    f"schema version {parsed} is not supported; expected {CONFIG_SCHEMA_VERSION}",
                )
    return out


def _validate_boc(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    fields = {"with_crc32c", "with_index"}
    _reject_unknown_keys(payload, fields, path, issues)
    _require_keys(payload, fields, path, issues)

    out: dict[str, Any] = {}
    for key in sorted(fields & payload.keys()):
        parsed = _as_bool(payload[key], _join(path, key), issues)
        if parsed is not None:
            out[key] = parsed
    return out


def _validate_output(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"format"}, path, issues)
    _require_keys(payload, {"format"}, path, issues)

    out: dict[str, Any] = {}
    if "format" in payload:
        parsed = _as_enum(
            payload["format"], _join(path, "format"), issues, allowed_values=OUTPUT_FORMATS
        )
        if parsed is not None:
            out["format"] = parsed
    return out


def _validate_observability(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    fields = {"log_level", "log_dir"}
    _reject_unknown_keys(payload, fields, path, issues)
    _require_keys(payload, fields, path, issues)

    out: dict[str, Any] = {}
    if "log_level" in payload:
        raw_level = payload["log_level"]
        level = raw_level.upper() if isinstance(raw_level, str) else raw_level
        parsed = _as_enum(level, _join(path, "log_level"), issues, allowed_values=LOG_LEVELS)
        if parsed is not None:
            out["log_level"] = parsed
    if "log_dir" in payload:
        log_dir = payload["log_dir"]
        if not isinstance(log_dir, str):
            issues.add(_join(path, "log_dir"), f"expected string, got {type(log_dir).__name__}")
        elif "\x00" in log_dir:
            issues.add(_join(path, "log_dir"), "must not contain NUL bytes")
        else:
            out["log_dir"] = log_dir.strip()
    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if not isinstance(existing, dict):
                existing = {}
                target[key] = existing
            _merge_into(existing, value)
        else:
            target[key] = copy.deepcopy(value)


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "OUTPUT_FORMATS",
    "BocConfig",
    "CodecConfig",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "MetaConfig",
    "ObservabilityConfig",
    "OutputConfig",
    "OutputFormat",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]
