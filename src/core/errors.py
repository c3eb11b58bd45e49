"""Exception hierarchy for envshell.

Every application error inherits from `EnvShellError`, which carries an
error code and the process exit code the CLI reports for it.
"""

from __future__ import annotations

from typing import Sequence


class EnvShellError(Exception):
    """Base exception for all envshell errors."""

    exit_code: int = 1

    def __init__(self, message: str, *, code: str = "INTERNAL_ERROR") -> None:
        super().__init__(message)
        self.code = code


class DeclarationError(EnvShellError):
    """Parse-time errors in an environment declaration."""

    exit_code = 2

    def __init__(self, message: str, *, field: str, code: str = "DECLARATION_ERROR") -> None:
        super().__init__(message, code=code)
        self.field = field


class MalformedDeclaration(DeclarationError):
    """The descriptor is not valid JSON or a field has the wrong shape."""

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(f"{field}: {message}", field=field, code="MALFORMED_DECLARATION")


class DuplicateEntry(DeclarationError):
    """A tool name or variable name appears more than once."""

    def __init__(self, *, field: str, entry: str) -> None:
        super().__init__(
            f"{field}: duplicate entry '{entry}'",
            field=field,
            code="DUPLICATE_ENTRY",
        )
        self.entry = entry


class ResolutionError(EnvShellError):
    """Errors while mapping a tool name to an installation path."""

    exit_code = 3

    def __init__(self, message: str, *, name: str, code: str = "RESOLUTION_ERROR") -> None:
        super().__init__(message, code=code)
        self.name = name


class UnknownTool(ResolutionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown tool '{name}'", name=name, code="UNKNOWN_TOOL")


class VersionUnavailable(ResolutionError):
    """No catalog version satisfies the requested constraint."""

    def __init__(self, name: str, constraint: str, available: Sequence[str] = ()) -> None:
        detail = ", ".join(available) if available else "none"
        super().__init__(
            f"no version of '{name}' satisfies '{constraint}' (available: {detail})",
            name=name,
            code="VERSION_UNAVAILABLE",
        )
        self.constraint = constraint
        self.available = tuple(available)


class CatalogUnavailable(ResolutionError):
    """The package catalog could not be read or reached."""

    def __init__(self, message: str, *, name: str = "") -> None:
        super().__init__(message, name=name, code="CATALOG_UNAVAILABLE")


class UnresolvedReference(EnvShellError):
    """A declared tool or package reference has no resolved counterpart.

    Unreachable while resolvers honour their contract; treated as fatal.
    """

    exit_code = 3

    def __init__(self, name: str) -> None:
        super().__init__(f"no resolved package for '{name}'", code="UNRESOLVED_REFERENCE")
        self.name = name


class ActivationError(EnvShellError):
    """Errors while starting the session process."""

    exit_code = 3

    def __init__(self, message: str, *, code: str = "ACTIVATION_ERROR") -> None:
        super().__init__(message, code=code)


class SpawnFailed(ActivationError):
    def __init__(self, argv: Sequence[str], error: OSError) -> None:
        program = argv[0] if argv else "<empty>"
        super().__init__(
            f"failed to spawn '{program}': {error.strerror or error}",
            code="SPAWN_FAILED",
        )
        self.argv = tuple(argv)
        self.errno = error.errno
