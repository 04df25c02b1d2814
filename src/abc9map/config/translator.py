"""Translate pass options into an immutable ``CommandConfig``.

Options fall into three groups:

* options forwarded to the external tool together with their value
  (``-exe``, ``-script``, ``-D``, ``-lut``, ``-luts``, ``-W``);
* switches forwarded to the external tool as-is (``-fast``,
  ``-showtmp``, ``-nomfs``);
* options consumed here (``-dff``, ``-nocleanup``, ``-box <file>``,
  ``-run <from>[:<to>]``).

Scanning stops at the first token that is none of the above.  That
token and everything after it are handed to the selection mechanism,
which owns their error handling.

Example
-------
::

    parsed = translate_args(["-lut", "6", "-dff", "top"], design.scratchpad)
    parsed.config.dff_mode        # True
    parsed.config.tool_args       # ("-lut", "6")
    parsed.selection_args         # ("top",)
"""
from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from abc9map.errors import ConfigError

if TYPE_CHECKING:
    from abc9map.design.model import Scratchpad

DEFAULT_DRIVER = "abc9_exe"

VALUE_OPTIONS: tuple[str, ...] = ("-exe", "-script", "-D", "-lut", "-luts", "-W")
SWITCH_OPTIONS: tuple[str, ...] = ("-fast", "-showtmp", "-nomfs")

SCRATCHPAD_DFF = "abc9.dff"
SCRATCHPAD_NOCLEANUP = "abc9.nocleanup"


# ---------------------------------------------------------------------------
# Configuration value
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommandConfig:
    """Per-invocation configuration of the mapping pipeline.

    Parameters
    ----------
    driver:
        Executable that runs the external optimizer.
    tool_args:
        Ordered tokens forwarded to ``driver``.
    dff_mode:
        Include flip-flops in the exported fragment.
    cleanup:
        Remove temp workspaces once a module has been processed.
    box_file:
        Box library passed to the box writer, or ``None`` to derive the
        box description automatically.
    """

    driver: str = DEFAULT_DRIVER
    tool_args: tuple[str, ...] = ()
    dff_mode: bool = False
    cleanup: bool = True
    box_file: Path | None = None

    @property
    def show_tmp(self) -> bool:
        """Return True if temp paths should appear verbatim in the log."""
        return "-showtmp" in self.tool_args

    @property
    def fast(self) -> bool:
        return "-fast" in self.tool_args

    def option_value(self, flag: str) -> str | None:
        """Return the value given for a forwarded ``flag``, last one wins."""
        value = None
        args = self.tool_args
        for i, token in enumerate(args[:-1]):
            if token == flag:
                value = args[i + 1]
        return value

    @property
    def inline_script(self) -> list[str] | None:
        """Commands of a ``-script +cmd1,cmd2`` option, or ``None``."""
        script = self.option_value("-script")
        if script is None or not script.startswith("+"):
            return None
        return [cmd for cmd in script[1:].split(",") if cmd]

    def invocation(self, cwd: Path | str, box: Path | str) -> list[str]:
        """Render the argv used to run the external tool in ``cwd``."""
        return [self.driver, *self.tool_args, "-cwd", str(cwd), "-box", str(box)]

    def command_line(self, cwd: Path | str, box: Path | str) -> str:
        """Render :meth:`invocation` as a shell-quoted string for logging."""
        return shlex.join(self.invocation(cwd, box))


class ConfigBuilder:
    """Accumulates options and produces a ``CommandConfig``.

    A builder is used for exactly one invocation; :meth:`build` returns
    a frozen value and the builder is discarded.
    """

    def __init__(self, driver: str = DEFAULT_DRIVER) -> None:
        self._driver = driver
        self._tool_args: list[str] = []
        self._dff_mode = False
        self._cleanup = True
        self._box_file: Path | None = None

    def defaults_from(self, scratchpad: "Scratchpad") -> "ConfigBuilder":
        """Seed the pass-local flags from the design scratchpad."""
        self._dff_mode = scratchpad.get_bool(SCRATCHPAD_DFF, self._dff_mode)
        self._cleanup = not scratchpad.get_bool(SCRATCHPAD_NOCLEANUP, not self._cleanup)
        return self

    def forward_option(self, flag: str, value: str) -> "ConfigBuilder":
        self._tool_args.extend((flag, value))
        return self

    def forward_switch(self, flag: str) -> "ConfigBuilder":
        self._tool_args.append(flag)
        return self

    def dff(self, enabled: bool = True) -> "ConfigBuilder":
        self._dff_mode = enabled
        return self

    def cleanup(self, enabled: bool) -> "ConfigBuilder":
        self._cleanup = enabled
        return self

    def box_file(self, path: str | Path | None) -> "ConfigBuilder":
        self._box_file = Path(path) if path is not None else None
        return self

    def build(self) -> CommandConfig:
        return CommandConfig(
            driver=self._driver,
            tool_args=tuple(self._tool_args),
            dff_mode=self._dff_mode,
            cleanup=self._cleanup,
            box_file=self._box_file,
        )


# ---------------------------------------------------------------------------
# Argument translation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedArgs:
    """Everything extracted from one pass invocation's arguments.

    Parameters
    ----------
    config:
        The translated configuration.
    run_from:
        First stage label to run, or ``None`` to start at the beginning.
    run_to:
        Label at which to stop (exclusive), or ``None`` to run to the end.
    selection_args:
        Unconsumed trailing tokens for the selection mechanism.
    """

    config: CommandConfig
    run_from: str | None = None
    run_to: str | None = None
    selection_args: tuple[str, ...] = ()


def parse_run_range(value: str) -> tuple[str | None, str | None]:
    """Split a ``-run`` value of the form ``from[:to]``.

    Raises
    ------
    ConfigError
        If the value has more than one colon or is empty.
    """
    if not value or value.count(":") > 1:
        raise ConfigError(f"Malformed -run range {value!r}; expected <from>[:<to>]")
    start, sep, stop = value.partition(":")
    return (start or None, (stop or None) if sep else None)


def translate_args(
    tokens: list[str] | tuple[str, ...],
    scratchpad: "Scratchpad",
    *,
    driver: str = DEFAULT_DRIVER,
) -> ParsedArgs:
    """Translate pass arguments into a ``ParsedArgs``.

    Parameters
    ----------
    tokens:
        Pass arguments, without the pass name.
    scratchpad:
        Source of the ``-dff`` and ``-nocleanup`` defaults.
    driver:
        Executable that runs the external optimizer.

    Returns
    -------
    ParsedArgs
        The configuration, the stage range and the selection tokens.
    """
    builder = ConfigBuilder(driver).defaults_from(scratchpad)
    run_from: str | None = None
    run_to: str | None = None

    argidx = 0
    while argidx < len(tokens):
        arg = tokens[argidx]
        has_value = argidx + 1 < len(tokens)
        if arg in VALUE_OPTIONS and has_value:
            builder.forward_option(arg, tokens[argidx + 1])
            argidx += 2
            continue
        if arg in SWITCH_OPTIONS:
            builder.forward_switch(arg)
            argidx += 1
            continue
        if arg == "-dff":
            builder.dff()
            argidx += 1
            continue
        if arg == "-nocleanup":
            builder.cleanup(False)
            argidx += 1
            continue
        if arg == "-box" and has_value:
            builder.box_file(tokens[argidx + 1])
            argidx += 2
            continue
        if arg == "-run" and has_value:
            run_from, run_to = parse_run_range(tokens[argidx + 1])
            argidx += 2
            continue
        break

    return ParsedArgs(
        config=builder.build(),
        run_from=run_from,
        run_to=run_to,
        selection_args=tuple(tokens[argidx:]),
    )
