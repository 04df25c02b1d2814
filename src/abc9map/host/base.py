"""Design host interface.

The mapping pipeline delegates every netlist transformation (cycle
breaking, hole extraction, AIG mapping, XAIGER export and import,
reintegration) to a *design host*: the synthesis framework that owns
the full design.  The pipeline talks to it exclusively through
structured ``Command`` values.
"""
from __future__ import annotations

import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from abc9map.design.model import Design


@dataclass(frozen=True)
class Command:
    """A delegated host command.

    Parameters
    ----------
    name:
        Command name, e.g. ``"abc9_ops"``.
    args:
        Ordered argument tokens.
    """

    name: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "Command":
        """Build a command from a shell-style command line."""
        tokens = shlex.split(text)
        if not tokens:
            raise ValueError("Cannot build a command from an empty string")
        return cls(tokens[0], tuple(tokens[1:]))

    def has_flag(self, flag: str) -> bool:
        return flag in self.args

    def value_of(self, flag: str) -> str | None:
        """Return the token following ``flag``, or ``None``."""
        try:
            index = self.args.index(flag)
        except ValueError:
            return None
        if index + 1 >= len(self.args):
            return None
        return self.args[index + 1]

    def render(self) -> str:
        """Render the command as a shell-quoted line."""
        return shlex.join((self.name, *self.args))

    def __str__(self) -> str:
        return self.render()


class DesignHost(ABC):
    """Executes delegated commands against a design.

    Implementations raise :class:`abc9map.errors.HostError` when a
    command fails; the pipeline treats that as fatal.
    """

    name: str = "host"

    @abstractmethod
    def run(self, design: "Design", command: Command) -> None:
        """Execute ``command`` on the active selection of ``design``."""
