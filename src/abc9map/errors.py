"""Exception types for abc9map.

Every fatal condition raised by the pipeline derives from
``Abc9MapError`` so that callers (and the CLI) can catch the whole
family with a single ``except`` clause.  Skip conditions (modules with
processes, fragments with no outputs) are *not* errors and are only
logged.
"""
from __future__ import annotations


def _with_module(message: str, module_name: str | None) -> str:
    return f"Module {module_name}: {message}" if module_name else message


class Abc9MapError(Exception):
    """Base class for all abc9map errors."""


class ConfigError(Abc9MapError, ValueError):
    """Raised when pass options cannot be translated into a configuration."""


class UnknownStageError(ConfigError):
    """Raised when a ``-run`` range names a stage label that does not exist."""

    def __init__(self, label: str, known: tuple[str, ...]) -> None:
        self.label = label
        self.known = known
        super().__init__(
            f"Unknown stage label {label!r}. "
            f"Known labels, in order: {', '.join(known)}."
        )


class SelectionError(Abc9MapError, ValueError):
    """Raised by the selection mechanism for tokens it cannot interpret."""


class SerializationError(Abc9MapError, ValueError):
    """Raised when a design snapshot is malformed."""


class MappingError(Abc9MapError):
    """A fatal per-module condition encountered by the mapping loop.

    Parameters
    ----------
    module_name:
        Name of the module that violated the precondition.
    message:
        Human-readable description of the violated precondition.
    """

    def __init__(self, module_name: str, message: str) -> None:
        self.module_name = module_name
        super().__init__(message)


class PartialSelectionError(MappingError):
    """Raised when only a subset of a module's members is selected."""

    def __init__(self, module_name: str) -> None:
        super().__init__(
            module_name,
            f"Can't handle partially selected module {module_name}! "
            "Select the whole module or leave it out of the selection.",
        )


class MissingDecompositionError(MappingError):
    """Raised when a module reaches ``map`` without a decomposition id.

    This happens when the ``map`` stage is resumed on a design that
    never went through ``pre``.
    """

    def __init__(self, module_name: str) -> None:
        super().__init__(
            module_name,
            f"Module {module_name} carries no decomposition id; "
            "run the 'pre' stage before 'map'.",
        )


class ToolInvocationError(Abc9MapError):
    """Raised when the external optimizer fails or leaves no usable result.

    Parameters
    ----------
    message:
        Description of the failure.
    returncode:
        The subprocess exit status, or ``None`` if it never started.
    stderr:
        Captured standard error of the subprocess, if any.

    The mapping loop sets :attr:`module_name` to the module being
    mapped when the error passes through it.
    """

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
        self.module_name: str | None = None

    def __str__(self) -> str:
        return _with_module(super().__str__(), self.module_name)


class HostError(Abc9MapError):
    """Raised by a design host when a delegated command fails.

    :attr:`module_name` is set by the mapping loop, as for
    ``ToolInvocationError``.
    """

    def __init__(self, command: str, message: str) -> None:
        self.command = command
        super().__init__(f"Command {command!r} failed: {message}")
        self.module_name: str | None = None

    def __str__(self) -> str:
        return _with_module(super().__str__(), self.module_name)
