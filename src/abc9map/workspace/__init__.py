"""Temp workspace management."""
from __future__ import annotations

from abc9map.workspace.tempdir import (
    BOX_FILE,
    OUTPUT_FILE,
    SYM_FILE,
    WORKSPACE_TEMPLATE,
    XAIG_FILE,
    TempWorkspace,
    WorkspaceManager,
    make_temp_dir,
    retained_template,
)

__all__ = [
    "BOX_FILE",
    "OUTPUT_FILE",
    "SYM_FILE",
    "WORKSPACE_TEMPLATE",
    "XAIG_FILE",
    "TempWorkspace",
    "WorkspaceManager",
    "make_temp_dir",
    "retained_template",
]
