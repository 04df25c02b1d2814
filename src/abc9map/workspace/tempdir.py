"""Scoped temp workspaces for one module's mapping attempt.

A workspace holds the fixed set of interchange files exchanged with the
external tool.  Workspaces are named from ``WORKSPACE_TEMPLATE``; when
they are to be kept, the two slashes of ``/tmp/`` become underscores so
the directory lands, visibly, in the current working directory.
"""
from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

WORKSPACE_TEMPLATE = "/tmp/abc9map-XXXXXX"

BOX_FILE = "input.box"
XAIG_FILE = "input.xaig"
SYM_FILE = "input.sym"
OUTPUT_FILE = "output.aig"


def retained_template(template: str) -> str:
    """Return ``template`` with positions 0 and 4 replaced by ``_``."""
    chars = list(template)
    for pos in (0, 4):
        if pos < len(chars):
            chars[pos] = "_"
    return "".join(chars)


def make_temp_dir(template: str) -> Path:
    """Create a fresh, empty directory named after ``template``.

    The trailing ``X`` characters of the template are replaced by a
    random unique string.
    """
    stem = template.rstrip("X")
    parent, _, prefix = stem.rpartition("/")
    if not parent and stem.startswith("/"):
        parent = "/"
    directory = tempfile.mkdtemp(prefix=prefix, dir=parent or ".")
    return Path(directory).resolve()


@dataclass(frozen=True)
class TempWorkspace:
    """Paths of one workspace directory and its artifact files."""

    path: Path

    @property
    def box_path(self) -> Path:
        return self.path / BOX_FILE

    @property
    def xaig_path(self) -> Path:
        return self.path / XAIG_FILE

    @property
    def sym_path(self) -> Path:
        return self.path / SYM_FILE

    @property
    def output_path(self) -> Path:
        return self.path / OUTPUT_FILE

    def remove(self) -> None:
        """Delete the workspace and everything below it."""
        shutil.rmtree(self.path)


class WorkspaceManager:
    """Hands out one ``TempWorkspace`` per mapping attempt.

    Parameters
    ----------
    cleanup:
        Remove each workspace when its ``with`` block exits normally.
        A workspace whose block exits with an exception is always kept
        so that its files can be inspected.
    show_tmp:
        Log workspace paths verbatim.  Otherwise they are replaced by a
        placeholder so the log reads the same on every run.
    template:
        Name template; trailing ``X`` characters are randomized.
    """

    def __init__(
        self,
        cleanup: bool = True,
        show_tmp: bool = False,
        template: str = WORKSPACE_TEMPLATE,
    ) -> None:
        self.cleanup = cleanup
        self.show_tmp = show_tmp
        self.template = template if cleanup else retained_template(template)

    def _display(self, workspace: TempWorkspace) -> str:
        return str(workspace.path) if self.show_tmp else "<abc-temp-dir>"

    @contextmanager
    def acquire(self, module_name: str) -> Iterator[TempWorkspace]:
        """Create a workspace for ``module_name`` and release it on exit."""
        workspace = TempWorkspace(make_temp_dir(self.template))
        logger.debug("Using temp directory %s for module %s.", self._display(workspace), module_name)
        try:
            yield workspace
        except BaseException:
            logger.warning(
                "Keeping temp directory %s of module %s for inspection.",
                workspace.path,
                module_name,
            )
            raise
        if self.cleanup:
            logger.info("Removing temp directory.")
            workspace.remove()
        else:
            logger.info("Keeping temp directory %s.", self._display(workspace))
