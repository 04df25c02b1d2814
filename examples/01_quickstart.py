#!/usr/bin/env python3
"""Example: Quickstart — abc9map

Minimal working example: build a small design, show the stage script,
then map it module by module with the recording host.

Usage:
    python examples/01_quickstart.py [path/to/yosys-abc]

Requirements:
    pip install abc9map
    an abc9_exe driver on PATH; the optional argument is forwarded as -exe
"""
from __future__ import annotations

import sys

import abc9map
from abc9map.design import Design, DesignSerializer, Module, Port, PortDirection
from abc9map.errors import Abc9MapError
from abc9map.host import RecordingHost


def build_design() -> Design:
    return Design(
        [
            Module(
                "alu",
                ports=[
                    Port("a", PortDirection.INPUT, 8),
                    Port("b", PortDirection.INPUT, 8),
                    Port("y", PortDirection.OUTPUT, 8),
                ],
                attributes={"abc9_ands": 120},
            ),
            Module(
                "ctrl",
                ports=[Port("clk", PortDirection.INPUT), Port("state", PortDirection.OUTPUT, 2)],
                processes=["$proc$ctrl.v:12$1"],
            ),
        ]
    )


def main() -> None:
    print(f"abc9map version: {abc9map.__version__}")

    # Step 1: Show what the pass would do with -dff
    print(abc9map.describe(["-dff"]))

    # Step 2: Run pre only, then save the snapshot
    design = build_design()
    host = RecordingHost()
    report = abc9map.execute(design, ["-run", "pre:map"], host)
    print(f"Stages run: {[s.value for s in report.stages]}")
    snapshot = DesignSerializer().to_yaml(design)
    print(snapshot)

    # Step 3: Resume from the snapshot and map through ABC
    resumed = DesignSerializer().from_yaml(snapshot)
    args = ["-lut", "6", "-run", "map"]
    if len(sys.argv) > 1:
        args = ["-exe", sys.argv[1], *args]
    try:
        report = abc9map.execute(resumed, args, host)
    except Abc9MapError as exc:
        print(f"Mapping failed: {exc}")
        return

    assert report.mapping is not None
    print(f"Mapped: {report.mapping.mapped}")
    print(f"Skipped (processes): {report.mapping.skipped}")
    print(f"ABC runs: {report.tool_invocations}")
    for line in host.rendered():
        print(f"  {line}")


if __name__ == "__main__":
    main()
