"""Core utilities for inkwell."""

from inkwell.core.errors import (
    ConfigError,
    ContentParseError,
    ContentValidationError,
    ErrorCode,
    InkwellError,
    SchemaConfigError,
)

__all__ = [
    "ErrorCode",
    "InkwellError",
    "ContentParseError",
    "ContentValidationError",
    "SchemaConfigError",
    "ConfigError",
]
