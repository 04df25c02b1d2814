"""Stage descriptions of the mapping script.

The script is plain data: a tuple of ``Stage`` values, each an ordered
tuple of ``Step`` values.  A step carries both its human-readable
template (used when the script is described) and the action that
performs it (used when the script is executed).  Which of the two is
used is decided by the strategy handed to the runner, never by the
steps themselves.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from abc9map.host.base import Command

if TYPE_CHECKING:
    from abc9map.config.translator import CommandConfig
    from abc9map.design.model import Design
    from abc9map.host.base import DesignHost
    from abc9map.mapping.loop import MappingLoop, MappingReport


class StageLabel(Enum):
    """Checkpoint labels, in execution order."""

    PRE = "pre"
    MAP = "map"
    POST = "post"

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(label.value for label in cls)


@dataclass
class RunContext:
    """Everything a step action needs.

    Parameters
    ----------
    design:
        The design being mapped.
    host:
        Executes delegated commands.
    config:
        The invocation's configuration.
    mapping:
        The loop driven by the ``map`` stage.
    """

    design: "Design"
    host: "DesignHost"
    config: "CommandConfig"
    mapping: "MappingLoop"
    report: "MappingReport | None" = None


Action = Callable[[RunContext], None]


@dataclass(frozen=True)
class Step:
    """One script step.

    Parameters
    ----------
    template:
        How the step is shown when the script is described.  May span
        several lines.
    action:
        What the step does when the script is executed.
    note:
        Annotation shown next to the template, e.g. ``"(only if -dff)"``.
    enabled:
        Disabled steps are described but not executed.
    """

    template: str
    action: Action
    note: str = ""
    enabled: bool = True


@dataclass(frozen=True)
class Stage:
    label: StageLabel
    steps: tuple[Step, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Step factories
# ---------------------------------------------------------------------------


def delegate(text: str, *, template: str | None = None, note: str = "", enabled: bool = True) -> Step:
    """Return a step that hands the command ``text`` to the host."""
    command = Command.parse(text)

    def action(ctx: RunContext) -> None:
        ctx.host.run(ctx.design, command)

    return Step(template=template or text, action=action, note=note, enabled=enabled)


def assign_decomposition_ids(ctx: RunContext) -> None:
    """Number every selected module so ``post`` can find it again."""
    for index, module in enumerate(ctx.design.selected_modules()):
        module.decomposition_id = index


def clear_decomposition_ids(ctx: RunContext) -> None:
    for module in ctx.design.selected_modules():
        module.decomposition_id = None


def run_mapping_loop(ctx: RunContext) -> None:
    ctx.report = ctx.mapping.run(ctx.design)


MAP_TEMPLATE = "\n".join(
    [
        "foreach module in selection",
        "    abc9_ops -write_box [(-box value)|(null)] <abc-temp-dir>/input.box",
        "    write_xaiger -map <abc-temp-dir>/input.sym <abc-temp-dir>/input.xaig",
        "    abc9_exe [options] -cwd <abc-temp-dir> -box <abc-temp-dir>/input.box",
        "    read_aiger -xaiger -wideports -module_name <module-name>$abc9 "
        "-map <abc-temp-dir>/input.sym <abc-temp-dir>/output.aig",
        "    abc9_ops -reintegrate",
    ]
)


def build_script(config: "CommandConfig") -> tuple[Stage, ...]:
    """Return the ``pre``/``map``/``post`` stages for ``config``."""
    break_scc = "abc9_ops -break_scc -prep_times -prep_holes"
    pre = Stage(
        StageLabel.PRE,
        (
            delegate("abc9_ops -check"),
            Step("<number selected modules>", assign_decomposition_ids),
            delegate("scc -set_attr abc9_scc_id {}"),
            delegate(
                break_scc + (" -dff" if config.dff_mode else ""),
                template=break_scc + " [-dff]",
                note="(option for -dff)",
            ),
            delegate("select -set abc9_holes A:abc9_holes"),
            delegate("flatten -wb @abc9_holes"),
            delegate("techmap @abc9_holes"),
            delegate("abc9_ops -prep_dff", note="(only if -dff)", enabled=config.dff_mode),
            delegate("opt -purge @abc9_holes"),
            delegate("aigmap"),
            delegate("wbflip @abc9_holes"),
        ),
    )
    map_stage = Stage(StageLabel.MAP, (Step(MAP_TEMPLATE, run_mapping_loop),))
    post = Stage(
        StageLabel.POST,
        (
            delegate("abc9_ops -unbreak_scc"),
            Step("<clear decomposition ids>", clear_decomposition_ids),
        ),
    )
    return (pre, map_stage, post)
