"""Unit tests for abc9map.mapping.loop.MappingLoop."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from abc9map.config.translator import CommandConfig
from abc9map.design.model import Design, Module, Port, PortDirection, Selection
from abc9map.errors import (
    HostError,
    MappingError,
    MissingDecompositionError,
    PartialSelectionError,
    ToolInvocationError,
)
from abc9map.external.tool import ExternalTool
from abc9map.host.recording import RecordingHost
from abc9map.mapping.loop import FragmentStats, MappingLoop
from abc9map.workspace.tempdir import WorkspaceManager


def _decomposed(*modules: Module) -> Design:
    design = Design(list(modules))
    for index, module in enumerate(design.modules):
        module.decomposition_id = index
    return design


def _loop(host: RecordingHost, tool: ExternalTool, workspaces: WorkspaceManager, **config) -> MappingLoop:
    return MappingLoop(CommandConfig(**config), host, tool, workspaces)


class _FailingTool(ExternalTool):
    def __init__(self) -> None:
        super().__init__()
        self.workspaces: list[Path] = []

    def invoke(self, config, workspace) -> None:  # type: ignore[override]
        self.invocations += 1
        self.workspaces.append(workspace.path)
        raise ToolInvocationError("abc9_exe exited with status 1", returncode=1)


# ===========================================================================
# Per-module flow
# ===========================================================================


class TestMapping:
    def test_maps_module(
        self, host: RecordingHost, fake_tool: ExternalTool, workspaces: WorkspaceManager, module_factory
    ) -> None:
        design = _decomposed(module_factory("alu", inputs={"a": 8}, outputs={"y": 4}))
        report = _loop(host, fake_tool, workspaces).run(design)
        assert report.mapped == ["alu"]
        assert fake_tool.invocations == 1
        assert [c.name for c in host.commands] == [
            "abc9_ops",
            "write_xaiger",
            "read_aiger",
            "abc9_ops",
        ]
        assert host.commands[2].value_of("-module_name") == "alu$abc9"
        assert host.reintegrated["alu"].port_widths() == {"a": 8, "y": 4}

    def test_modules_in_design_order(
        self, host: RecordingHost, fake_tool: ExternalTool, workspaces: WorkspaceManager, module_factory
    ) -> None:
        design = _decomposed(module_factory("b"), module_factory("a"))
        report = _loop(host, fake_tool, workspaces).run(design)
        assert report.mapped == ["b", "a"]
        assert len(set(fake_tool.workspaces)) == 2

    def test_skips_modules_with_processes(
        self,
        host: RecordingHost,
        fake_tool: ExternalTool,
        module_factory,
        workspaces: WorkspaceManager,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        design = _decomposed(module_factory("ctrl", processes=["$proc$1"]), module_factory("alu"))
        design.module("ctrl").decomposition_id = None
        with caplog.at_level(logging.INFO, logger="abc9map.mapping.loop"):
            report = _loop(host, fake_tool, workspaces).run(design)
        assert report.skipped == ["ctrl"]
        assert report.mapped == ["alu"]
        assert "Skipping module ctrl as it contains processes." in caplog.text

    def test_zero_outputs_skips_tool(
        self,
        host: RecordingHost,
        fake_tool: ExternalTool,
        workspaces: WorkspaceManager,
        workspace_root: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        design = _decomposed(Module("sink", ports=[Port("a", PortDirection.INPUT, 4)]))
        with caplog.at_level(logging.INFO, logger="abc9map.mapping.loop"):
            report = _loop(host, fake_tool, workspaces).run(design)
        assert report.empty == ["sink"]
        assert report.mapped == []
        assert fake_tool.invocations == 0
        assert "Don't call ABC as there is nothing to map." in caplog.text
        assert "with 4 inputs and 0 outputs" in caplog.text
        assert list(workspace_root.iterdir()) == []

    def test_workspaces_removed(
        self,
        host: RecordingHost,
        fake_tool: ExternalTool,
        module_factory,
        workspaces: WorkspaceManager,
        workspace_root: Path,
    ) -> None:
        _loop(host, fake_tool, workspaces).run(_decomposed(module_factory("alu")))
        assert list(workspace_root.iterdir()) == []

    def test_null_box_by_default(
        self, host: RecordingHost, fake_tool: ExternalTool, workspaces: WorkspaceManager, module_factory
    ) -> None:
        _loop(host, fake_tool, workspaces).run(_decomposed(module_factory("alu")))
        assert host.commands[0].args[:2] == ("-write_box", "(null)")

    def test_box_file_passed(
        self,
        host: RecordingHost,
        fake_tool: ExternalTool,
        module_factory,
        workspaces: WorkspaceManager,
        tmp_path: Path,
    ) -> None:
        lib = tmp_path / "cells.box"
        lib.write_text("MUXF7 1 0 3 1\n")
        _loop(host, fake_tool, workspaces, box_file=lib).run(_decomposed(module_factory("alu")))
        assert host.commands[0].args[:2] == ("-write_box", str(lib))

    def test_stale_statistics_reset(
        self, host: RecordingHost, fake_tool: ExternalTool, workspaces: WorkspaceManager, module_factory
    ) -> None:
        design = _decomposed(module_factory("alu"))
        design.scratchpad.set("write_xaiger.num_ands", 999)
        _loop(host, fake_tool, workspaces).run(design)
        assert FragmentStats.from_scratchpad(design.scratchpad).num_ands == 0


# ===========================================================================
# Fatal conditions
# ===========================================================================


class TestFatal:
    def test_missing_decomposition(
        self, host: RecordingHost, fake_tool: ExternalTool, workspaces: WorkspaceManager, module_factory
    ) -> None:
        design = Design([module_factory("alu")])
        with pytest.raises(MissingDecompositionError, match="pre"):
            _loop(host, fake_tool, workspaces).run(design)
        assert host.commands == []

    def test_missing_decomposition_checked_before_any_export(
        self, host: RecordingHost, fake_tool: ExternalTool, workspaces: WorkspaceManager, module_factory
    ) -> None:
        design = _decomposed(module_factory("a"), module_factory("b"))
        design.module("b").decomposition_id = None
        with pytest.raises(MissingDecompositionError):
            _loop(host, fake_tool, workspaces).run(design)
        assert fake_tool.invocations == 0

    def test_box_module_rejected(
        self, host: RecordingHost, fake_tool: ExternalTool, workspaces: WorkspaceManager, module_factory
    ) -> None:
        design = _decomposed(module_factory("MUXF7"))
        design.module("MUXF7").attributes["abc9_box_id"] = 1
        with pytest.raises(MappingError, match="MUXF7"):
            _loop(host, fake_tool, workspaces).run(design)

    def test_partial_selection_rejected(
        self, host: RecordingHost, fake_tool: ExternalTool, workspaces: WorkspaceManager, module_factory
    ) -> None:
        design = _decomposed(module_factory("alu"))
        partial = Selection()
        partial.select_member("alu", "y")
        design.push_selection(partial)
        with pytest.raises(PartialSelectionError, match="partially selected module alu"):
            _loop(host, fake_tool, workspaces).run(design)
        assert host.commands == []

    def test_tool_failure_keeps_workspace(
        self, host: RecordingHost, workspaces: WorkspaceManager, module_factory
    ) -> None:
        tool = _FailingTool()
        design = _decomposed(module_factory("alu"))
        with pytest.raises(ToolInvocationError) as info:
            _loop(host, tool, workspaces).run(design)
        assert info.value.module_name == "alu"
        assert str(info.value).startswith("Module alu: ")
        (kept,) = tool.workspaces
        assert (kept / "input.box").is_file()
        assert (kept / "input.sym").is_file()
        assert (kept / "input.xaig").is_file()

    def test_earlier_modules_stay_mapped(
        self, fake_tool: ExternalTool, workspaces: WorkspaceManager, module_factory
    ) -> None:
        host = RecordingHost(fail_on=["read_aiger -xaiger -wideports -module_name 'b$abc9'"])
        design = _decomposed(module_factory("a"), module_factory("b"))
        with pytest.raises(HostError) as info:
            _loop(host, fake_tool, workspaces).run(design)
        assert info.value.module_name == "b"
        assert "Module b: " in str(info.value)
        assert list(host.reintegrated) == ["a"]

    def test_selection_stack_balanced_after_failure(
        self, workspaces: WorkspaceManager, fake_tool: ExternalTool, module_factory
    ) -> None:
        host = RecordingHost(fail_on=["write_xaiger"])
        design = _decomposed(module_factory("alu"))
        depth = len(design.selection_stack)
        with pytest.raises(HostError):
            _loop(host, fake_tool, workspaces).run(design)
        assert len(design.selection_stack) == depth
        assert design.selection.full
