"""External optimizer invocation."""
from __future__ import annotations

from abc9map.external.tool import ExternalTool

__all__ = ["ExternalTool"]
