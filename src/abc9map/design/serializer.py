"""Design snapshot serialization.

Provides round-trip serialization of a ``Design`` to and from plain
dicts, JSON and YAML.  Only the slice of the design the pipeline cares
about is stored: modules (ports, processes, flip-flop count,
attributes, decomposition id), the scratchpad, and the active selection.

Usage
-----
::

    from abc9map.design.serializer import DesignSerializer

    serializer = DesignSerializer()
    design = serializer.from_yaml(Path("design.yaml").read_text())
    text = serializer.to_yaml(design)
"""
from __future__ import annotations

import json

import yaml

from abc9map.design.model import Design, Module, Port, PortDirection, Scratchpad, Selection
from abc9map.errors import SerializationError


class DesignSerializer:
    """Converts between ``Design`` objects and plain Python dicts."""

    # ------------------------------------------------------------------
    # Serialization (Design → dict)
    # ------------------------------------------------------------------

    def to_dict(self, design: Design) -> dict[str, object]:
        """Serialize a ``Design`` to a JSON-compatible dict."""
        data: dict[str, object] = {
            "scratchpad": design.scratchpad.as_dict(),
            "modules": [self._module_to_dict(m) for m in design.modules],
        }
        selection = design.selection
        if not selection.full:
            data["selection"] = self._selection_to_list(selection)
        return data

    def _module_to_dict(self, module: Module) -> dict[str, object]:
        return {
            "name": module.name,
            "ports": [
                {"name": p.name, "direction": p.direction.value, "width": p.width}
                for p in module.ports
            ],
            "processes": list(module.processes),
            "flops": module.flops,
            "attributes": dict(module.attributes),
            "decomposition_id": module.decomposition_id,
        }

    def _selection_to_list(self, selection: Selection) -> list[str]:
        tokens = sorted(selection.modules)
        for name in sorted(selection.members):
            tokens.extend(f"{name}/{member}" for member in sorted(selection.members[name]))
        return tokens

    # ------------------------------------------------------------------
    # Deserialization (dict → Design)
    # ------------------------------------------------------------------

    def from_dict(self, data: object) -> Design:
        """Deserialize a ``Design`` from a dict produced by :meth:`to_dict`.

        Raises
        ------
        SerializationError
            If required keys are missing or values have the wrong type.
        """
        if not isinstance(data, dict):
            raise SerializationError("Design snapshot must be a mapping")

        scratchpad = data.get("scratchpad") or {}
        if not isinstance(scratchpad, dict):
            raise SerializationError("'scratchpad' must be a mapping")

        raw_modules = data.get("modules") or []
        if not isinstance(raw_modules, list):
            raise SerializationError("'modules' must be a list")

        design = Design(scratchpad=Scratchpad({str(k): v for k, v in scratchpad.items()}))
        for raw in raw_modules:
            try:
                design.add_module(self._module_from_dict(raw))
            except ValueError as exc:
                raise SerializationError(str(exc)) from exc

        selection_tokens = data.get("selection")
        if selection_tokens is not None:
            design.selection_stack[0] = self._selection_from_list(design, selection_tokens)
        return design

    def _module_from_dict(self, raw: object) -> Module:
        if not isinstance(raw, dict) or "name" not in raw:
            raise SerializationError(f"Module entry must be a mapping with a 'name': {raw!r}")
        ports = []
        for p in raw.get("ports") or []:
            try:
                ports.append(
                    Port(
                        name=str(p["name"]),
                        direction=PortDirection(p.get("direction", "input")),
                        width=int(p.get("width", 1)),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise SerializationError(f"Bad port {p!r} in module {raw['name']!r}: {exc}") from exc
        decomposition_id = raw.get("decomposition_id")
        return Module(
            name=str(raw["name"]),
            ports=ports,
            processes=[str(p) for p in raw.get("processes") or []],
            flops=int(raw.get("flops") or 0),
            attributes=dict(raw.get("attributes") or {}),
            decomposition_id=int(decomposition_id) if decomposition_id is not None else None,
        )

    def _selection_from_list(self, design: Design, tokens: object) -> Selection:
        if not isinstance(tokens, list):
            raise SerializationError("'selection' must be a list of module or module/member names")
        selection = Selection()
        for token in tokens:
            name, _, member = str(token).partition("/")
            if name not in design:
                raise SerializationError(f"Selection refers to unknown module {name!r}")
            if member:
                selection.select_member(name, member)
            else:
                selection.select(name)
        return selection

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, design: Design, indent: int = 2) -> str:
        """Serialize a ``Design`` to a JSON string."""
        return json.dumps(self.to_dict(design), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> Design:
        """Deserialize a ``Design`` from a JSON string."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"Invalid JSON: {exc}") from exc
        return self.from_dict(data)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, design: Design) -> str:
        """Serialize a ``Design`` to a YAML string."""
        return yaml.dump(self.to_dict(design), default_flow_style=False, allow_unicode=True, sort_keys=False)

    def from_yaml(self, text: str) -> Design:
        """Deserialize a ``Design`` from a YAML string."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise SerializationError(f"Invalid YAML: {exc}") from exc
        return self.from_dict(data)
