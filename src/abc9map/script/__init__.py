"""Staged mapping script and its runner."""
from __future__ import annotations

from abc9map.script.runner import (
    DescribeStrategy,
    ExecuteStrategy,
    ScriptRunner,
    ScriptStrategy,
    resolve_label,
)
from abc9map.script.stages import RunContext, Stage, StageLabel, Step, build_script, delegate

__all__ = [
    "DescribeStrategy",
    "ExecuteStrategy",
    "RunContext",
    "ScriptRunner",
    "ScriptStrategy",
    "Stage",
    "StageLabel",
    "Step",
    "build_script",
    "delegate",
    "resolve_label",
]
