"""Turn trailing pass arguments into a ``Selection``.

Each token is either a module pattern (``top``, ``alu_*``) selecting
whole modules, or ``module/member`` selecting a single member of the
matching modules, which leaves those modules only partially selected.
Glob patterns follow :mod:`fnmatch` rules.
"""
from __future__ import annotations

import fnmatch
import logging

from abc9map.design.model import Design, Selection
from abc9map.errors import SelectionError

logger = logging.getLogger(__name__)


def select_from_args(design: Design, tokens: list[str] | tuple[str, ...]) -> Selection | None:
    """Build a selection from ``tokens``.

    Parameters
    ----------
    design:
        The design whose module names the patterns are matched against.
    tokens:
        Trailing arguments left over after option parsing.

    Returns
    -------
    Selection | None
        The new selection, or ``None`` when ``tokens`` is empty and the
        active selection should be used unchanged.

    Raises
    ------
    SelectionError
        If a token looks like an option or is an empty pattern.
    """
    if not tokens:
        return None

    names = [m.name for m in design.modules]
    selection = Selection()
    for token in tokens:
        if token.startswith("-"):
            raise SelectionError(f"Unknown option or option in arguments: {token!r}")
        module_pattern, _, member = token.partition("/")
        if not module_pattern or (token.endswith("/") and not member):
            raise SelectionError(f"Malformed selection pattern {token!r}")

        matched = fnmatch.filter(names, module_pattern)
        if not matched:
            logger.warning("Selection %r didn't match any module.", token)
            continue
        for name in matched:
            if member:
                selection.select_member(name, member)
            else:
                selection.select(name)
    return selection
