"""Per-module mapping loop."""
from __future__ import annotations

from abc9map.mapping.loop import MAPPED_SUFFIX, FragmentStats, MappingLoop, MappingReport

__all__ = ["MAPPED_SUFFIX", "FragmentStats", "MappingLoop", "MappingReport"]
