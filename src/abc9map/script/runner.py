"""Run or describe the staged mapping script.

``ScriptRunner`` picks the stages inside the requested ``from``/``to``
range and feeds them to a strategy:

* ``ExecuteStrategy`` performs every enabled step;
* ``DescribeStrategy`` renders every step as text and touches nothing.

Range rules: with no ``from`` the run starts at the first stage; it
stops *before* the ``to`` stage, or runs to the end when ``to`` is
not given.  When ``from`` and ``to`` name the same stage, only that
stage runs.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from abc9map.errors import UnknownStageError
from abc9map.script.stages import Stage, StageLabel

if TYPE_CHECKING:
    from abc9map.script.stages import RunContext, Step

logger = logging.getLogger(__name__)


def resolve_label(label: str | None) -> StageLabel | None:
    """Return the ``StageLabel`` named ``label``; ``None`` passes through.

    Raises
    ------
    UnknownStageError
        If ``label`` is not a stage name.
    """
    if label is None:
        return None
    try:
        return StageLabel(label)
    except ValueError:
        raise UnknownStageError(label, StageLabel.names()) from None


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class ScriptStrategy(ABC):
    """Consumes stages one at a time."""

    @abstractmethod
    def run_stage(self, stage: Stage, ctx: "RunContext | None") -> None:
        """Process every step of ``stage``."""


class ExecuteStrategy(ScriptStrategy):
    """Performs the enabled steps of each stage."""

    def run_stage(self, stage: Stage, ctx: "RunContext | None") -> None:
        if ctx is None:
            raise ValueError("ExecuteStrategy needs a RunContext")
        logger.info("Executing stage %s.", stage.label.value)
        for step in stage.steps:
            if step.enabled:
                step.action(ctx)


class DescribeStrategy(ScriptStrategy):
    """Renders stages as an indented, human-readable script.

    The rendered lines accumulate in :attr:`lines`; :meth:`text` joins
    them.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []

    def run_stage(self, stage: Stage, ctx: "RunContext | None") -> None:
        self.lines.append("")
        self.lines.append(f"    {stage.label.value}:")
        for step in stage.steps:
            self.lines.extend(self._render(step))

    def _render(self, step: "Step") -> list[str]:
        rendered = [f"        {line}" for line in step.template.splitlines()]
        if step.note:
            rendered[0] = f"{rendered[0]}    {step.note}"
        return rendered

    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class ScriptRunner:
    """Runs a range of stages with a strategy.

    Parameters
    ----------
    stages:
        All stages, in execution order.
    run_from:
        Label of the first stage to run, or ``None``.
    run_to:
        Label of the stage to stop before, or ``None``.
    """

    def __init__(
        self,
        stages: tuple[Stage, ...],
        run_from: str | None = None,
        run_to: str | None = None,
    ) -> None:
        self.stages = stages
        self.run_from = resolve_label(run_from)
        self.run_to = resolve_label(run_to)

    def selected_stages(self) -> list[Stage]:
        """Return the stages inside the requested range, in order."""
        if self.run_from is not None and self.run_from == self.run_to:
            return [s for s in self.stages if s.label == self.run_from]

        selected = []
        active = self.run_from is None
        for stage in self.stages:
            if stage.label == self.run_from:
                active = True
            if stage.label == self.run_to:
                active = False
            if active:
                selected.append(stage)
        return selected

    def run(self, strategy: ScriptStrategy, ctx: "RunContext | None" = None) -> list[StageLabel]:
        """Feed the selected stages to ``strategy``; return their labels."""
        done = []
        for stage in self.selected_stages():
            strategy.run_stage(stage, ctx)
            done.append(stage.label)
        return done

    def describe(self) -> str:
        """Render every stage, regardless of the requested range."""
        strategy = DescribeStrategy()
        for stage in self.stages:
            strategy.run_stage(stage, None)
        return strategy.text()
