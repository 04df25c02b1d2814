"""Design hosts: the executors of delegated commands.

Importing this package registers the built-in ``recording`` host.
"""
from __future__ import annotations

from abc9map.host.base import Command, DesignHost
from abc9map.host.recording import RecordingHost
from abc9map.host.registry import (
    ENTRYPOINT_GROUP,
    HostAlreadyRegisteredError,
    HostNotFoundError,
    HostRegistry,
    host_registry,
)

__all__ = [
    "ENTRYPOINT_GROUP",
    "Command",
    "DesignHost",
    "HostAlreadyRegisteredError",
    "HostNotFoundError",
    "HostRegistry",
    "RecordingHost",
    "host_registry",
]
