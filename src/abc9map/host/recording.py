"""A design host that records commands and emulates their artifacts.

``RecordingHost`` does not transform any logic.  It keeps an ordered
log of every delegated command and produces just enough of the
interchange artifacts (box description, port-symbol map, fragment
statistics, imported module) for the pipeline to run end to end.  It
is the default host of the CLI and the test double of the suite.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from abc9map.design.model import Module, Port, PortDirection
from abc9map.errors import HostError
from abc9map.host.base import Command, DesignHost
from abc9map.host.registry import host_registry

if TYPE_CHECKING:
    from abc9map.design.model import Design

logger = logging.getLogger(__name__)

NULL_BOX = "(null)"
DFF_PREPARED_ATTR = "abc9_dff_prepared"
ANDS_ATTR = "abc9_ands"


@host_registry.register("recording")
class RecordingHost(DesignHost):
    """Records delegated commands and fakes the interchange files.

    Parameters
    ----------
    fail_on:
        Command names (``"write_xaiger"``) or rendered command prefixes
        (``"abc9_ops -reintegrate"``) that raise ``HostError``.
    """

    name = "recording"

    def __init__(self, fail_on: Iterable[str] = ()) -> None:
        self.fail_on = tuple(fail_on)
        self.commands: list[Command] = []
        self.reintegrated: dict[str, Module] = {}

    def rendered(self) -> list[str]:
        """Return the recorded commands as text lines."""
        return [c.render() for c in self.commands]

    def run(self, design: "Design", command: Command) -> None:
        self.commands.append(command)
        logger.debug("host: %s", command)
        text = command.render()
        for pattern in self.fail_on:
            if command.name == pattern or text.startswith(pattern):
                raise HostError(text, "failure requested by fail_on")

        if command.name == "write_xaiger":
            self._write_xaiger(design, command)
        elif command.name == "read_aiger":
            self._read_aiger(design, command)
        elif command.name == "abc9_ops":
            if command.has_flag("-write_box"):
                self._write_box(command)
            if command.has_flag("-prep_dff"):
                for module in design.selected_modules():
                    module.attributes[DFF_PREPARED_ATTR] = True
            if command.has_flag("-reintegrate"):
                self._reintegrate(design, command)

    # ------------------------------------------------------------------
    # Emulated commands
    # ------------------------------------------------------------------

    def _only_selected(self, design: "Design", command: Command) -> Module:
        modules = design.selected_modules()
        if len(modules) != 1:
            raise HostError(command.render(), f"expected one selected module, found {len(modules)}")
        return modules[0]

    def _write_box(self, command: Command) -> None:
        index = command.args.index("-write_box")
        try:
            library, target = command.args[index + 1], command.args[index + 2]
        except IndexError:
            raise HostError(command.render(), "-write_box needs a library and a target") from None
        if library == NULL_BOX:
            content = f"# box library: {NULL_BOX}\n"
        else:
            try:
                content = Path(library).read_text(encoding="utf-8")
            except OSError as exc:
                raise HostError(command.render(), f"cannot read box library: {exc}") from exc
        Path(target).write_text(content, encoding="utf-8")

    def _write_xaiger(self, design: "Design", command: Command) -> None:
        sym = command.value_of("-map")
        if sym is None or len(command.args) < 3:
            raise HostError(command.render(), "usage: write_xaiger -map <sym> <xaig>")
        xaig = command.args[-1]
        module = self._only_selected(design, command)

        flops = module.flops if module.attributes.get(DFF_PREPARED_ATTR) else 0
        inouts = module.bit_count(PortDirection.INOUT)
        num_inputs = module.bit_count(PortDirection.INPUT) + inouts + flops
        num_outputs = module.bit_count(PortDirection.OUTPUT) + inouts + flops
        try:
            num_ands = int(module.attributes.get(ANDS_ATTR, 0))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            num_ands = 0

        lines = [f"{p.direction.value} {p.name} {p.width}" for p in module.ports]
        Path(sym).write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
        Path(xaig).write_text(
            f"xaiger {module.name} i={num_inputs} o={num_outputs} a={num_ands} ff={flops}\n",
            encoding="utf-8",
        )

        pad = design.scratchpad
        pad.set("write_xaiger.num_ands", num_ands)
        pad.set("write_xaiger.num_wires", num_inputs + num_outputs + num_ands)
        pad.set("write_xaiger.num_inputs", num_inputs)
        pad.set("write_xaiger.num_outputs", num_outputs)

    def _read_aiger(self, design: "Design", command: Command) -> None:
        module_name = command.value_of("-module_name")
        sym = command.value_of("-map")
        if module_name is None or sym is None:
            raise HostError(command.render(), "-module_name and -map are required")
        result = Path(command.args[-1])
        if not result.is_file():
            raise HostError(command.render(), f"result file {result.name} does not exist")

        ports = []
        try:
            for line in Path(sym).read_text(encoding="utf-8").splitlines():
                direction, name, width = line.split()
                ports.append(Port(name, PortDirection(direction), int(width)))
        except (OSError, ValueError) as exc:
            raise HostError(command.render(), f"bad port-symbol map: {exc}") from exc
        design.add_module(Module(name=module_name, ports=ports))

    def _reintegrate(self, design: "Design", command: Command) -> None:
        module = self._only_selected(design, command)
        mapped_name = f"{module.name}$abc9"
        if mapped_name not in design:
            raise HostError(command.render(), f"no imported module {mapped_name}")
        self.reintegrated[module.name] = design.remove_module(mapped_name)
        module.attributes.pop(DFF_PREPARED_ATTR, None)
