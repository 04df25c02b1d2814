"""Pass option translation."""
from __future__ import annotations

from abc9map.config.translator import (
    DEFAULT_DRIVER,
    SWITCH_OPTIONS,
    VALUE_OPTIONS,
    CommandConfig,
    ConfigBuilder,
    ParsedArgs,
    parse_run_range,
    translate_args,
)

__all__ = [
    "DEFAULT_DRIVER",
    "SWITCH_OPTIONS",
    "VALUE_OPTIONS",
    "CommandConfig",
    "ConfigBuilder",
    "ParsedArgs",
    "parse_run_range",
    "translate_args",
]
