"""CLI entry point for abc9map.

Invoked as::

    abc9map [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m abc9map.cli.main

Commands
--------
run         Map a design snapshot through the pipeline
describe    Show the pass options and the stage script
config      Show how pass options are translated
hosts       List registered design hosts
version     Show version information

Pass options are given after ``--`` so that they are not taken for
options of the command itself::

    abc9map run design.yaml -- -lut 6 -dff top
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

if TYPE_CHECKING:
    from abc9map.design.model import Design

console = Console()
err_console = Console(stderr=True)

OPTION_HELP: tuple[tuple[str, str], ...] = (
    ("-exe <command>", "use the specified command instead of the default driver to execute ABC"),
    ("-script <file>", "use the specified ABC script; a leading '+' passes the rest as commands, commas become blanks"),
    ("-fast", "use faster default scripts at the cost of output quality"),
    ("-D <picoseconds>", "set the delay target"),
    ("-lut <width>", "map to LUTs of (max) the specified width"),
    ("-lut <w1>:<w2>", "LUTs up to <w2>; LUTs wider than <w1> double in area cost per input"),
    ("-lut <file>", "pass this LUT library file to ABC"),
    ("-luts <c1>,<c2>,..", "LUT costs for 1, 2, 3, .. inputs"),
    ("-W <picoseconds>", "wire delay passed through to ABC"),
    ("-nomfs", "disable the mfs optimization step in ABC"),
    ("-dff", "also pass flip-flops through to ABC"),
    ("-nocleanup", "keep the temp workspaces for debugging"),
    ("-showtmp", "print temp workspace names in the log"),
    ("-box <file>", "pass this box library to ABC; use with -lut"),
    ("-run <from>[:<to>]", "only run the stages from <from> up to, not including, <to>"),
)


def _configure_logging(verbose: bool) -> None:
    """Route library log records through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )


def _load_design(path: str) -> "Design":
    """Read a YAML or JSON design snapshot, exiting on error."""
    from abc9map.design.serializer import DesignSerializer
    from abc9map.errors import SerializationError

    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)

    serializer = DesignSerializer()
    try:
        if path.endswith(".json"):
            return serializer.from_json(text)
        return serializer.from_yaml(text)
    except SerializationError as exc:
        err_console.print(f"[red]Error:[/red] Bad design snapshot {path}: {exc}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="abc9map")
def cli() -> None:
    """Module-by-module technology mapping through an external ABC9 optimizer."""


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from abc9map import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]abc9map[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# hosts command
# ---------------------------------------------------------------------------


@cli.command(name="hosts")
def hosts_command() -> None:
    """List design hosts, including those installed as entry-points."""
    from abc9map.host import host_registry

    host_registry.load_entrypoints()
    table = Table(title="Design hosts")
    table.add_column("Name", style="bold")
    table.add_column("Class")
    for name in host_registry.names():
        cls = host_registry.get(name)
        table.add_row(name, f"{cls.__module__}.{cls.__qualname__}")
    console.print(table)


# ---------------------------------------------------------------------------
# describe command
# ---------------------------------------------------------------------------


@cli.command(name="describe")
def describe_command() -> None:
    """Show the pass options and the stage script without running anything."""
    from abc9map import describe

    table = Table(title="abc9map [options] [selection]", show_lines=False)
    table.add_column("Option", style="bold", no_wrap=True)
    table.add_column("Effect")
    for flag, text in OPTION_HELP:
        table.add_row(flag, text)
    console.print(table)
    console.print("\n[bold]The following commands are executed by this pass:[/bold]")
    console.print(describe(), markup=False, highlight=False)


# ---------------------------------------------------------------------------
# config command
# ---------------------------------------------------------------------------


@cli.command(name="config", context_settings={"ignore_unknown_options": True})
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def config_command(args: tuple[str, ...]) -> None:
    """Show how pass options ARGS are translated."""
    from abc9map.config import translate_args
    from abc9map.design.model import Scratchpad
    from abc9map.errors import ConfigError

    try:
        parsed = translate_args(args, Scratchpad())
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    config = parsed.config
    table = Table(title="Command configuration", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("invocation", config.command_line("<abc-temp-dir>", "<abc-temp-dir>/input.box"))
    table.add_row("dff", str(config.dff_mode))
    table.add_row("cleanup", str(config.cleanup))
    table.add_row("box", str(config.box_file) if config.box_file else "(null)")
    if config.inline_script is not None:
        table.add_row("inline script", "; ".join(config.inline_script))
    table.add_row("run", f"{parsed.run_from or ''}:{parsed.run_to or ''}")
    table.add_row("selection", " ".join(parsed.selection_args) or "(active selection)")
    console.print(table)


# ---------------------------------------------------------------------------
# run command
# ---------------------------------------------------------------------------


@cli.command(name="run", context_settings={"ignore_unknown_options": True})
@click.argument("design_file", type=click.Path(exists=False))
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option("--host", "host_name", default="recording", show_default=True, help="Design host to use")
@click.option("--driver", default=None, help="Executable that runs ABC (default: abc9_exe)")
@click.option("--output", default=None, help="Write the resulting design snapshot here")
@click.option("--verbose", is_flag=True, default=False, help="Log debug output")
def run_command(
    design_file: str,
    args: tuple[str, ...],
    host_name: str,
    driver: str | None,
    output: str | None,
    verbose: bool,
) -> None:
    """Map the design snapshot DESIGN_FILE through the pipeline.

    ARGS are pass options followed by an optional module selection.

    Examples:

    \b
        abc9map run design.yaml -- -lut 6
        abc9map run design.yaml -- -dff -nocleanup -run pre:post alu
        abc9map run design.yaml --output mapped.yaml -- -run map:map
    """
    from abc9map.config import DEFAULT_DRIVER
    from abc9map.design.serializer import DesignSerializer
    from abc9map.errors import Abc9MapError
    from abc9map.host import HostNotFoundError, host_registry
    from abc9map.pipeline import execute

    _configure_logging(verbose)
    design = _load_design(design_file)

    host_registry.load_entrypoints()
    try:
        host = host_registry.get(host_name)()
    except HostNotFoundError as exc:
        err_console.print(f"[red]Error:[/red] {exc.args[0]}")
        sys.exit(1)

    try:
        report = execute(design, args, host, driver=driver or DEFAULT_DRIVER)
    except Abc9MapError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    table = Table(title=f"abc9map: {design_file}")
    table.add_column("Module", style="bold")
    table.add_column("Outcome")
    if report.mapping is not None:
        for name in report.mapping.mapped:
            table.add_row(name, "[green]mapped[/green]")
        for name in report.mapping.empty:
            table.add_row(name, "[dim]nothing to map[/dim]")
        for name in report.mapping.skipped:
            table.add_row(name, "[yellow]skipped (processes)[/yellow]")
    console.print(table)
    stages = ", ".join(label.value for label in report.stages) or "(none)"
    console.print(
        f"\n[bold]Stages:[/bold] {stages}  "
        f"[bold]ABC runs:[/bold] {report.tool_invocations}"
    )

    if output:
        serializer = DesignSerializer()
        text = serializer.to_json(design) if output.endswith(".json") else serializer.to_yaml(design)
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Design written to[/green] {output}")


if __name__ == "__main__":
    cli()
