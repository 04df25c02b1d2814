"""Unit tests for abc9map.external.tool.ExternalTool.

The driver is a small shell script written into ``tmp_path`` so that a
real subprocess is started.
"""
from __future__ import annotations

import stat
import subprocess
from pathlib import Path

import pytest

from abc9map.config.translator import CommandConfig
from abc9map.errors import ToolInvocationError
from abc9map.external.tool import ExternalTool
from abc9map.workspace.tempdir import TempWorkspace


def _script(tmp_path: Path, body: str) -> str:
    path = tmp_path / "fake_abc9"
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


@pytest.fixture()
def workspace(tmp_path: Path) -> TempWorkspace:
    ws = tmp_path / "ws"
    ws.mkdir()
    return TempWorkspace(ws)


class TestExternalTool:
    def test_success(self, tmp_path: Path, workspace: TempWorkspace) -> None:
        driver = _script(tmp_path, 'echo "$@" > args.txt\necho aig > output.aig\n')
        config = CommandConfig(driver=driver, tool_args=("-lut", "6"))
        tool = ExternalTool()
        tool.invoke(config, workspace)
        assert tool.invocations == 1
        args = (workspace.path / "args.txt").read_text().split()
        assert args == ["-lut", "6", "-cwd", str(workspace.path), "-box", str(workspace.box_path)]

    def test_runs_in_workspace(self, tmp_path: Path, workspace: TempWorkspace) -> None:
        driver = _script(tmp_path, "pwd > output.aig\n")
        ExternalTool().invoke(CommandConfig(driver=driver), workspace)
        assert Path(workspace.output_path.read_text().strip()).resolve() == workspace.path.resolve()

    def test_nonzero_exit(self, tmp_path: Path, workspace: TempWorkspace) -> None:
        driver = _script(tmp_path, "echo 'bad lut library' >&2\nexit 3\n")
        with pytest.raises(ToolInvocationError) as info:
            ExternalTool().invoke(CommandConfig(driver=driver), workspace)
        assert info.value.returncode == 3
        assert "bad lut library" in info.value.stderr
        assert "status 3" in str(info.value)

    def test_missing_result(self, tmp_path: Path, workspace: TempWorkspace) -> None:
        driver = _script(tmp_path, "exit 0\n")
        with pytest.raises(ToolInvocationError, match="no readable output.aig"):
            ExternalTool().invoke(CommandConfig(driver=driver), workspace)

    def test_empty_result(self, tmp_path: Path, workspace: TempWorkspace) -> None:
        driver = _script(tmp_path, ": > output.aig\n")
        with pytest.raises(ToolInvocationError, match="no readable"):
            ExternalTool().invoke(CommandConfig(driver=driver), workspace)

    def test_driver_not_found(self, tmp_path: Path, workspace: TempWorkspace) -> None:
        config = CommandConfig(driver=str(tmp_path / "does-not-exist"))
        with pytest.raises(ToolInvocationError, match="Cannot start") as info:
            ExternalTool().invoke(config, workspace)
        assert info.value.returncode is None

    def test_no_timeout_passed(self, workspace: TempWorkspace, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []

        def fake_run(argv, **kwargs):
            calls.append((argv, kwargs))
            workspace.output_path.write_text("aig")
            return subprocess.CompletedProcess(argv, 0, stdout="done\n", stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        ExternalTool().invoke(CommandConfig(tool_args=("-fast",)), workspace)
        argv, kwargs = calls[0]
        assert argv[:2] == ["abc9_exe", "-fast"]
        assert kwargs["cwd"] == workspace.path
        assert "timeout" not in kwargs
        assert kwargs["errors"] == "replace"

    def test_non_utf8_output_tolerated(self, tmp_path: Path, workspace: TempWorkspace) -> None:
        driver = _script(
            tmp_path, "printf '\\377\\376 progress\\n'\nprintf '\\377' >&2\necho aig > output.aig\n"
        )
        tool = ExternalTool()
        tool.invoke(CommandConfig(driver=driver), workspace)
        assert tool.invocations == 1

    def test_non_utf8_stderr_in_failure(self, tmp_path: Path, workspace: TempWorkspace) -> None:
        driver = _script(tmp_path, "printf 'bad \\377 byte' >&2\nexit 2\n")
        with pytest.raises(ToolInvocationError) as info:
            ExternalTool().invoke(CommandConfig(driver=driver), workspace)
        assert info.value.returncode == 2
        assert "bad \ufffd byte" in info.value.stderr
