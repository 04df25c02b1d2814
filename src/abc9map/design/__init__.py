"""Design data model: modules, selections, scratchpad and snapshots."""
from __future__ import annotations

from abc9map.design.model import Design, Module, Port, PortDirection, Scratchpad, Selection
from abc9map.design.selection import select_from_args
from abc9map.design.serializer import DesignSerializer

__all__ = [
    "Design",
    "DesignSerializer",
    "Module",
    "Port",
    "PortDirection",
    "Scratchpad",
    "Selection",
    "select_from_args",
]
