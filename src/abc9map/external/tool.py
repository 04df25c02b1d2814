"""Invocation of the external optimizer.

The tool runs as a blocking subprocess inside the module's workspace.
No timeout is applied, so a hung tool hangs the whole run.
"""
from __future__ import annotations

import logging
import subprocess
from typing import TYPE_CHECKING

from abc9map.errors import ToolInvocationError

if TYPE_CHECKING:
    from abc9map.config.translator import CommandConfig
    from abc9map.workspace.tempdir import TempWorkspace

logger = logging.getLogger(__name__)


class ExternalTool:
    """Runs the configured driver on one workspace.

    Each call is counted in :attr:`invocations`, which the pipeline
    report exposes.
    """

    def __init__(self) -> None:
        self.invocations = 0

    def invoke(self, config: "CommandConfig", workspace: "TempWorkspace") -> None:
        """Run the tool and check that it left a result behind.

        Raises
        ------
        ToolInvocationError
            If the tool cannot be started, exits with a non-zero status,
            or does not produce a non-empty result file.
        """
        argv = config.invocation(workspace.path, workspace.box_path)
        if config.show_tmp:
            logger.info("Running: %s", config.command_line(workspace.path, workspace.box_path))
        else:
            logger.info(
                "Running: %s",
                config.command_line("<abc-temp-dir>", f"<abc-temp-dir>/{workspace.box_path.name}"),
            )
        self.invocations += 1

        try:
            result = subprocess.run(
                argv,
                cwd=workspace.path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise ToolInvocationError(f"Cannot start {argv[0]!r}: {exc}") from exc

        for line in result.stdout.splitlines():
            logger.debug("%s: %s", config.driver, line)

        if result.returncode != 0:
            raise ToolInvocationError(
                f"{config.driver} exited with status {result.returncode}: "
                f"{result.stderr.strip() or '(no stderr)'}",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        output = workspace.output_path
        if not output.is_file() or output.stat().st_size == 0:
            raise ToolInvocationError(
                f"{config.driver} finished but produced no readable {output.name}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
