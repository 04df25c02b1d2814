"""The per-module mapping loop run by the ``map`` stage.

For every selected module the loop exports the module's box
description and logic fragment into a fresh workspace, runs the
external optimizer on it, imports the result as ``<module>$abc9`` and
asks the host to splice it back into the original module.

Modules are processed strictly one after another.  The loop pushes its
own selection on entry, selects exactly one module at a time in it, and
pops it on exit even when a module aborts the run.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from abc9map.design.model import Selection
from abc9map.errors import (
    HostError,
    MappingError,
    MissingDecompositionError,
    PartialSelectionError,
    ToolInvocationError,
)
from abc9map.host.base import Command
from abc9map.workspace.tempdir import WorkspaceManager

if TYPE_CHECKING:
    from abc9map.config.translator import CommandConfig
    from abc9map.design.model import Design, Module, Scratchpad
    from abc9map.external.tool import ExternalTool
    from abc9map.host.base import DesignHost
    from abc9map.workspace.tempdir import TempWorkspace

logger = logging.getLogger(__name__)

MAPPED_SUFFIX = "$abc9"
NULL_BOX = "(null)"


@dataclass(frozen=True)
class FragmentStats:
    """Size of an exported fragment, as reported through the scratchpad."""

    num_ands: int
    num_wires: int
    num_inputs: int
    num_outputs: int

    KEYS = (
        "write_xaiger.num_ands",
        "write_xaiger.num_wires",
        "write_xaiger.num_inputs",
        "write_xaiger.num_outputs",
    )

    @classmethod
    def from_scratchpad(cls, scratchpad: "Scratchpad") -> "FragmentStats":
        ands, wires, inputs, outputs = (scratchpad.get_int(k) for k in cls.KEYS)
        return cls(num_ands=ands, num_wires=wires, num_inputs=inputs, num_outputs=outputs)

    @classmethod
    def reset(cls, scratchpad: "Scratchpad") -> None:
        for key in cls.KEYS:
            scratchpad.unset(key)


@dataclass
class MappingReport:
    """Outcome of one pass over the selected modules.

    Parameters
    ----------
    mapped:
        Modules whose fragment went through the external tool.
    skipped:
        Modules skipped because they contain processes.
    empty:
        Modules whose fragment had no outputs, so the tool was not run.
    """

    mapped: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    empty: list[str] = field(default_factory=list)


class MappingLoop:
    """Maps every selected module of a design through the external tool.

    Parameters
    ----------
    config:
        The invocation's configuration.
    host:
        Executes the export, import and reintegration commands.
    tool:
        Runs the external optimizer.
    workspaces:
        Source of per-module temp workspaces.  Defaults to a manager
        following ``config.cleanup`` and ``config.show_tmp``.
    """

    def __init__(
        self,
        config: "CommandConfig",
        host: "DesignHost",
        tool: "ExternalTool",
        workspaces: WorkspaceManager | None = None,
    ) -> None:
        self.config = config
        self.host = host
        self.tool = tool
        self.workspaces = workspaces or WorkspaceManager(
            cleanup=config.cleanup, show_tmp=config.show_tmp
        )

    def run(self, design: "Design") -> MappingReport:
        """Map all modules of the active selection, in design order.

        Raises
        ------
        MappingError
            For a box module, a partially selected module, or a module
            without a decomposition id.
        ToolInvocationError
            If the external tool fails.  ``module_name`` names the module.
        HostError
            If a delegated command fails.  ``module_name`` names the module.
        """
        outer = design.selection
        modules = design.selected_modules()
        self._check_decomposed(modules)

        report = MappingReport()
        with design.scoped_selection(Selection()) as selection:
            for module in modules:
                try:
                    self._map_module(design, outer, selection, module, report)
                finally:
                    selection.clear()
        return report

    def _check_decomposed(self, modules: list["Module"]) -> None:
        for module in modules:
            if not module.has_processes and module.decomposition_id is None:
                raise MissingDecompositionError(module.name)

    def _map_module(
        self,
        design: "Design",
        outer: Selection,
        selection: Selection,
        module: "Module",
        report: MappingReport,
    ) -> None:
        if module.has_processes:
            logger.info("Skipping module %s as it contains processes.", module.name)
            report.skipped.append(module.name)
            return
        if module.is_box:
            raise MappingError(module.name, f"Module {module.name} is a box and cannot be mapped.")
        if not outer.is_whole_module(module.name):
            raise PartialSelectionError(module.name)

        selection.select(module.name)
        try:
            self._map_selected(design, module, report)
        except (ToolInvocationError, HostError) as exc:
            if exc.module_name is None:
                exc.module_name = module.name
            raise

    def _map_selected(self, design: "Design", module: "Module", report: MappingReport) -> None:
        with self.workspaces.acquire(module.name) as workspace:
            stats = self._export(design, workspace)
            logger.info(
                "Extracted %d AND gates and %d wires to a netlist network "
                "with %d inputs and %d outputs.",
                stats.num_ands,
                stats.num_wires,
                stats.num_inputs,
                stats.num_outputs,
            )
            if stats.num_outputs == 0:
                logger.info("Don't call ABC as there is nothing to map.")
                report.empty.append(module.name)
                return

            self.tool.invoke(self.config, workspace)
            self._import(design, module, workspace)
            self.host.run(design, Command("abc9_ops", ("-reintegrate",)))
            report.mapped.append(module.name)

    def _export(self, design: "Design", workspace: "TempWorkspace") -> FragmentStats:
        box = str(self.config.box_file) if self.config.box_file is not None else NULL_BOX
        self.host.run(design, Command("abc9_ops", ("-write_box", box, str(workspace.box_path))))

        FragmentStats.reset(design.scratchpad)
        self.host.run(
            design,
            Command("write_xaiger", ("-map", str(workspace.sym_path), str(workspace.xaig_path))),
        )
        return FragmentStats.from_scratchpad(design.scratchpad)

    def _import(self, design: "Design", module: "Module", workspace: "TempWorkspace") -> None:
        self.host.run(
            design,
            Command(
                "read_aiger",
                (
                    "-xaiger",
                    "-wideports",
                    "-module_name",
                    f"{module.name}{MAPPED_SUFFIX}",
                    "-map",
                    str(workspace.sym_path),
                    str(workspace.output_path),
                ),
            ),
        )
