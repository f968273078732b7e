"""
tvc-codec config package public API.

Loads ``tvc.toml`` plus ``TVC_`` env overrides and fails fast with structured
validation/load errors.
"""

from tvc_codec.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    load_config,
)
from tvc_codec.config.schema import (
    DEFAULT_CONFIG,
    LOG_LEVELS,
    OUTPUT_FORMATS,
    CodecConfig,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    OutputFormat,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "LOG_LEVELS",
    "OUTPUT_FORMATS",
    "CodecConfig",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "OutputFormat",
    "assert_valid_config",
    "default_config",
    "load_config",
    "merge_config",
    "validate_config",
]
