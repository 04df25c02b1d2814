"""Registry of design host implementations.

Hosts register under a short name either with the ``@register``
decorator or, for hosts shipped by other packages, through the
``abc9map.hosts`` entry-point group::

    [project.entry-points."abc9map.hosts"]
    yosys = "my_package.hosts:YosysHost"

Lookup::

    from abc9map.host.registry import host_registry

    host_cls = host_registry.get("recording")
    host = host_cls()
"""
from __future__ import annotations

import importlib.metadata
import logging
from collections.abc import Callable

from abc9map.host.base import DesignHost

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "abc9map.hosts"


class HostNotFoundError(KeyError):
    """Raised when a requested host name is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.host_name = name
        self.available = available
        super().__init__(
            f"Host {name!r} is not registered. "
            f"Available hosts: {', '.join(available) or '(none)'}. "
            "Check that the providing package is installed and declares "
            f"an entry-point in the {ENTRYPOINT_GROUP!r} group."
        )


class HostAlreadyRegisteredError(ValueError):
    """Raised when registering a name that is already taken."""

    def __init__(self, name: str) -> None:
        self.host_name = name
        super().__init__(
            f"Host {name!r} is already registered. "
            "Use a unique name or deregister the existing entry first."
        )


class HostRegistry:
    """Name → ``DesignHost`` subclass mapping."""

    def __init__(self) -> None:
        self._hosts: dict[str, type[DesignHost]] = {}

    def register(self, name: str) -> Callable[[type[DesignHost]], type[DesignHost]]:
        """Return a class decorator that registers the class under ``name``."""

        def decorator(cls: type[DesignHost]) -> type[DesignHost]:
            self.register_class(name, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type[DesignHost]) -> None:
        """Register ``cls`` under ``name``.

        Raises
        ------
        HostAlreadyRegisteredError
            If ``name`` is taken.
        TypeError
            If ``cls`` is not a ``DesignHost`` subclass.
        """
        if name in self._hosts:
            raise HostAlreadyRegisteredError(name)
        if not (isinstance(cls, type) and issubclass(cls, DesignHost)):
            raise TypeError(f"Cannot register {cls!r} under {name!r}: it must subclass DesignHost.")
        self._hosts[name] = cls
        logger.debug("Registered host %r -> %s", name, cls.__qualname__)

    def deregister(self, name: str) -> None:
        if name not in self._hosts:
            raise HostNotFoundError(name, self.names())
        del self._hosts[name]

    def get(self, name: str) -> type[DesignHost]:
        try:
            return self._hosts[name]
        except KeyError:
            raise HostNotFoundError(name, self.names()) from None

    def names(self) -> list[str]:
        """Return registered host names in alphabetical order."""
        return sorted(self._hosts)

    def __contains__(self, name: object) -> bool:
        return name in self._hosts

    def __len__(self) -> int:
        return len(self._hosts)

    def __repr__(self) -> str:
        return f"HostRegistry(hosts={self.names()})"

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> None:
        """Register hosts declared as entry-points in ``group``.

        Already registered names are skipped, so repeated calls are
        harmless.  Entry-points that fail to import or do not name a
        ``DesignHost`` subclass are logged and skipped.
        """
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name in self._hosts:
                logger.debug("Host entry-point %r already registered; skipping.", ep.name)
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception("Failed to load host entry-point %r; skipping.", ep.name)
                continue
            try:
                self.register_class(ep.name, cls)
            except TypeError:
                logger.warning("Entry-point %r is not a DesignHost; skipping.", ep.name)


host_registry = HostRegistry()
