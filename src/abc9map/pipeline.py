"""Top-level entry points: execute or describe the mapping pipeline."""
from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from abc9map.config.translator import DEFAULT_DRIVER, CommandConfig, translate_args
from abc9map.design.model import Scratchpad
from abc9map.design.selection import select_from_args
from abc9map.external.tool import ExternalTool
from abc9map.mapping.loop import MappingLoop, MappingReport
from abc9map.script.runner import ExecuteStrategy, ScriptRunner
from abc9map.script.stages import RunContext, StageLabel, build_script

if TYPE_CHECKING:
    from abc9map.design.model import Design
    from abc9map.host.base import DesignHost
    from abc9map.workspace.tempdir import WorkspaceManager

logger = logging.getLogger(__name__)


@dataclass
class PipelineReport:
    """What a pipeline run did.

    Parameters
    ----------
    config:
        The configuration the run used.
    stages:
        Labels of the stages that ran, in order.
    mapping:
        Outcome of the ``map`` stage, or ``None`` if it did not run.
    tool_invocations:
        Number of times the external tool was started.
    """

    config: CommandConfig
    stages: list[StageLabel] = field(default_factory=list)
    mapping: MappingReport | None = None
    tool_invocations: int = 0


def execute(
    design: "Design",
    args: list[str] | tuple[str, ...],
    host: "DesignHost",
    *,
    tool: ExternalTool | None = None,
    workspaces: "WorkspaceManager | None" = None,
    driver: str = DEFAULT_DRIVER,
) -> PipelineReport:
    """Run the mapping pipeline on ``design``.

    Parameters
    ----------
    design:
        The design to map.  Mapped modules are modified in place.
    args:
        Pass options followed by an optional selection.
    host:
        Executes the delegated commands.
    tool:
        Runs the external optimizer; a fresh ``ExternalTool`` if omitted.
    workspaces:
        Overrides the workspace manager derived from the options.
    driver:
        Executable that runs the external optimizer.

    Returns
    -------
    PipelineReport
        Stages run and per-module outcome.

    Raises
    ------
    abc9map.errors.Abc9MapError
        On any fatal condition.  Modules mapped before the failure stay
        mapped.
    """
    parsed = translate_args(args, design.scratchpad, driver=driver)
    config = parsed.config
    runner = ScriptRunner(build_script(config), parsed.run_from, parsed.run_to)
    selection = select_from_args(design, parsed.selection_args)

    tool = tool or ExternalTool()
    ctx = RunContext(
        design=design,
        host=host,
        config=config,
        mapping=MappingLoop(config, host, tool, workspaces),
    )

    logger.info("Executing ABC9 pass.")
    report = PipelineReport(config=config)
    scope = design.scoped_selection(selection) if selection is not None else nullcontext()
    invocations_before = tool.invocations
    with scope:
        report.stages = runner.run(ExecuteStrategy(), ctx)
    report.mapping = ctx.report
    report.tool_invocations = tool.invocations - invocations_before
    return report


def describe(args: list[str] | tuple[str, ...] = ()) -> str:
    """Render the full script for the given options without running it."""
    parsed = translate_args(args, Scratchpad())
    return ScriptRunner(build_script(parsed.config)).describe()
