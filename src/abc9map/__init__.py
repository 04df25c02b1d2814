"""abc9map — module-by-module technology mapping through an external ABC9 optimizer.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import abc9map
    from abc9map.design import Design, Module, Port, PortDirection
    from abc9map.host import RecordingHost

    design = Design([
        Module("alu", ports=[
            Port("a", PortDirection.INPUT, 8),
            Port("y", PortDirection.OUTPUT, 8),
        ]),
    ])

    # Run pre, map and post with a 6-input LUT target (abc9_exe on PATH)
    report = abc9map.execute(design, ["-lut", "6"], RecordingHost())
    report.mapping.mapped      # ['alu']

    # Show what the script would do
    print(abc9map.describe(["-dff"]))

    abc9map.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import TYPE_CHECKING

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from abc9map.design.model import Design
    from abc9map.external.tool import ExternalTool
    from abc9map.host.base import DesignHost
    from abc9map.pipeline import PipelineReport


def execute(
    design: "Design",
    args: list[str] | tuple[str, ...],
    host: "DesignHost",
    *,
    tool: "ExternalTool | None" = None,
) -> "PipelineReport":
    """Run the ``pre``/``map``/``post`` pipeline on ``design``.

    Parameters
    ----------
    design:
        The design to map, modified in place.
    args:
        Pass options (``-lut 6``, ``-dff``, ``-run map:post`` ...)
        followed by an optional module selection.
    host:
        Executes the delegated design commands.
    tool:
        Runs the external optimizer.

    Returns
    -------
    PipelineReport
        Stages run and the per-module outcome.

    Raises
    ------
    abc9map.errors.Abc9MapError
        On any fatal condition.
    """
    from abc9map.pipeline import execute as _execute

    return _execute(design, args, host, tool=tool)


def describe(args: list[str] | tuple[str, ...] = ()) -> str:
    """Render the mapping script as text without running anything.

    Parameters
    ----------
    args:
        Pass options; they only affect which commands are shown enabled.

    Returns
    -------
    str
        The indented script, one stage block per label.
    """
    from abc9map.pipeline import describe as _describe

    return _describe(args)


__all__ = [
    "__version__",
    "execute",
    "describe",
]
