"""Shared test fixtures for abc9map.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from abc9map.design.model import Design, Module, Port, PortDirection
from abc9map.external.tool import ExternalTool
from abc9map.host.recording import RecordingHost
from abc9map.workspace.tempdir import WorkspaceManager


class FakeTool(ExternalTool):
    """Stands in for the external optimizer without starting a process."""

    def __init__(self) -> None:
        super().__init__()
        self.workspaces: list[Path] = []

    def invoke(self, config, workspace) -> None:  # type: ignore[override]
        self.invocations += 1
        self.workspaces.append(workspace.path)
        workspace.output_path.write_text("aig 0 0 0 0 0\n", encoding="utf-8")


def make_module(
    name: str,
    *,
    inputs: dict[str, int] | None = None,
    outputs: dict[str, int] | None = None,
    processes: list[str] | None = None,
    flops: int = 0,
) -> Module:
    """Build a module from ``{port: width}`` mappings."""
    ports = [Port(n, PortDirection.INPUT, w) for n, w in (inputs or {"a": 1}).items()]
    ports += [Port(n, PortDirection.OUTPUT, w) for n, w in (outputs or {"y": 1}).items()]
    return Module(name=name, ports=ports, processes=list(processes or []), flops=flops)


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string."""
    return "0.1.0"


@pytest.fixture()
def module_factory() -> Callable[..., Module]:
    return make_module


@pytest.fixture()
def two_module_design() -> Design:
    """A mappable ``alu`` with wide ports and a process-bearing ``ctrl``."""
    return Design(
        [
            make_module("alu", inputs={"a": 8, "b": 8}, outputs={"y": 8}),
            make_module("ctrl", processes=["$proc$ctrl.v:12$1"]),
        ]
    )


@pytest.fixture()
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture()
def fake_tool() -> FakeTool:
    return FakeTool()


@pytest.fixture()
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "workspaces"
    root.mkdir()
    return root


@pytest.fixture()
def workspaces(workspace_root: Path) -> WorkspaceManager:
    """A cleaning workspace manager rooted inside ``tmp_path``."""
    return WorkspaceManager(cleanup=True, template=f"{workspace_root}/abc9map-XXXXXX")
