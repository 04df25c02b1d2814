"""The narrow slice of the design data model used by the mapping pipeline.

The pipeline never edits netlist contents itself; it only reads module
names, ports and processes, moves selections on and off the selection
stack, exchanges scalar values through the scratchpad, and tags modules
with a decomposition id between the ``pre`` and ``post`` stages.
Everything else is the business of the design host.
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum

# ---------------------------------------------------------------------------
# Ports and modules
# ---------------------------------------------------------------------------


class PortDirection(Enum):
    """Direction of a module port."""

    INPUT = "input"
    OUTPUT = "output"
    INOUT = "inout"


@dataclass(frozen=True)
class Port:
    """A (possibly multi-bit) module port.

    Parameters
    ----------
    name:
        Port name, unique within its module.
    direction:
        Signal direction.
    width:
        Number of bits, at least 1.
    """

    name: str
    direction: PortDirection
    width: int = 1

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError(f"Port {self.name!r} must be at least 1 bit wide, got {self.width}")


@dataclass
class Module:
    """A named netlist unit.

    Parameters
    ----------
    name:
        Module name, unique within the design.
    ports:
        Ports in declaration order.
    processes:
        Names of behavioral (process) constructs.  A module with any
        processes cannot be mapped.
    flops:
        Number of clocked storage elements in the module.
    attributes:
        Free-form module attributes.
    decomposition_id:
        Assigned by the ``pre`` stage, consumed by ``post``.
    """

    name: str
    ports: list[Port] = field(default_factory=list)
    processes: list[str] = field(default_factory=list)
    flops: int = 0
    attributes: dict[str, object] = field(default_factory=dict)
    decomposition_id: int | None = None

    @property
    def has_processes(self) -> bool:
        """Return True if the module contains behavioral constructs."""
        return bool(self.processes)

    @property
    def is_box(self) -> bool:
        """Return True if the module is a black-box description."""
        return "abc9_box_id" in self.attributes

    def port_widths(self) -> dict[str, int]:
        """Return a mapping of port name to bit width."""
        return {p.name: p.width for p in self.ports}

    def bit_count(self, direction: PortDirection) -> int:
        """Return the total number of bits over all ports in ``direction``."""
        return sum(p.width for p in self.ports if p.direction is direction)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


@dataclass
class Selection:
    """The set of design objects an operation applies to.

    A selection is either *full* (everything), or lists whole modules in
    ``modules`` and partially selected modules, with the names of their
    selected members, in ``members``.
    """

    full: bool = False
    modules: set[str] = field(default_factory=set)
    members: dict[str, set[str]] = field(default_factory=dict)

    def select(self, module_name: str) -> None:
        """Select ``module_name`` as a whole."""
        if self.full:
            return
        self.modules.add(module_name)
        self.members.pop(module_name, None)

    def select_member(self, module_name: str, member: str) -> None:
        """Select a single member of ``module_name``."""
        if self.full or module_name in self.modules:
            return
        self.members.setdefault(module_name, set()).add(member)

    def clear(self) -> None:
        """Deselect everything."""
        self.full = False
        self.modules.clear()
        self.members.clear()

    def is_selected(self, module_name: str) -> bool:
        """Return True if the module is selected wholly or in part."""
        return self.full or module_name in self.modules or bool(self.members.get(module_name))

    def is_whole_module(self, module_name: str) -> bool:
        """Return True if the module is selected as a whole."""
        return self.full or module_name in self.modules


# ---------------------------------------------------------------------------
# Scratchpad
# ---------------------------------------------------------------------------

_TRUE_STRINGS = frozenset({"1", "true"})
_FALSE_STRINGS = frozenset({"0", "false"})


class Scratchpad:
    """String-keyed store of scalar values attached to a design.

    Values written by hosts may be strings; the typed getters accept
    both native values and their string forms and fall back to the
    caller's default for anything they cannot interpret.
    """

    def __init__(self, values: dict[str, object] | None = None) -> None:
        self._values: dict[str, object] = dict(values or {})

    def set(self, key: str, value: object) -> None:
        """Store ``value`` under ``key``."""
        self._values[key] = value

    def unset(self, key: str) -> None:
        """Remove ``key`` if present."""
        self._values.pop(key, None)

    def get(self, key: str, default: object = None) -> object:
        """Return the raw value under ``key``."""
        return self._values.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Return ``key`` as a bool, or ``default`` if absent or not boolean."""
        value = self._values.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Return ``key`` as an int, or ``default`` if absent or not numeric."""
        value = self._values.get(key)
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return default
        return default

    def as_dict(self) -> dict[str, object]:
        """Return a copy of all stored values."""
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __repr__(self) -> str:
        return f"Scratchpad({self._values!r})"


# ---------------------------------------------------------------------------
# Design
# ---------------------------------------------------------------------------


class Design:
    """A collection of modules plus scratchpad and selection stack.

    The selection stack always holds at least one entry: the full
    selection pushed at construction.  Scoped operations push their own
    selection with :meth:`scoped_selection` and the stack is restored
    when they exit, whether normally or by an exception.
    """

    def __init__(
        self,
        modules: list[Module] | None = None,
        scratchpad: Scratchpad | None = None,
    ) -> None:
        self._modules: dict[str, Module] = {}
        self.scratchpad = scratchpad if scratchpad is not None else Scratchpad()
        self.selection_stack: list[Selection] = [Selection(full=True)]
        for module in modules or []:
            self.add_module(module)

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------

    def add_module(self, module: Module) -> Module:
        """Add ``module``; its name must not already exist."""
        if module.name in self._modules:
            raise ValueError(f"Design already contains a module named {module.name!r}")
        self._modules[module.name] = module
        return module

    def remove_module(self, name: str) -> Module:
        """Remove and return the module called ``name``."""
        return self._modules.pop(name)

    def module(self, name: str) -> Module:
        """Return the module called ``name``."""
        return self._modules[name]

    @property
    def modules(self) -> list[Module]:
        """All modules in insertion order."""
        return list(self._modules.values())

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selection(self) -> Selection:
        """The active (top-of-stack) selection."""
        return self.selection_stack[-1]

    def push_selection(self, selection: Selection) -> None:
        self.selection_stack.append(selection)

    def pop_selection(self) -> Selection:
        if len(self.selection_stack) == 1:
            raise RuntimeError("Cannot pop the base selection of a design")
        return self.selection_stack.pop()

    @contextmanager
    def scoped_selection(self, selection: Selection) -> Iterator[Selection]:
        """Make ``selection`` active for the duration of a ``with`` block."""
        self.push_selection(selection)
        try:
            yield selection
        finally:
            self.pop_selection()

    def selected_modules(self) -> list[Module]:
        """Modules selected wholly or in part by the active selection."""
        selection = self.selection
        return [m for m in self._modules.values() if selection.is_selected(m.name)]

    def selected_whole_module(self, name: str) -> bool:
        return self.selection.is_whole_module(name)

    def __repr__(self) -> str:
        return f"Design(modules={list(self._modules)}, selection_depth={len(self.selection_stack)})"
