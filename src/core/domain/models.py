"""Domain models (Pydantic v2).

These models describe *what* an environment is: the tools it asks for, the
concrete packages they resolved to and the final process environment. They
know nothing about catalogs, HTTP or subprocesses.

All of them are frozen: a declaration is immutable once parsed, and resolved
tools and activation environments are never mutated after creation.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

SEARCH_PATH_VARIABLE = "PATH"


class ToolReference(BaseModel):
    """A tool requested by a declaration, e.g. `rustc>=1.70`."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Package name as known to the catalog.",
    )
    constraint: str | None = Field(
        default=None,
        description="Normalized version constraint (`>=1.70,<2`), if any.",
    )

    def __str__(self) -> str:
        return f"{self.name}{self.constraint or ''}"


class EnvironmentDeclaration(BaseModel):
    """Parsed descriptor: ordered tools plus variable expressions."""

    model_config = ConfigDict(frozen=True)

    tools: tuple[ToolReference, ...] = Field(
        default_factory=tuple,
        description="Requested tools, in declaration order.",
    )
    variables: dict[str, str] = Field(
        default_factory=dict,
        description="Variable name -> value expression, in declaration order.",
    )
    shell_hook: str | None = Field(
        default=None,
        description="Shell commands run before the session or command starts.",
    )
    package_refs: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Packages referenced via `pkg()` in variable expressions.",
    )

    @property
    def tool_names(self) -> tuple[str, ...]:
        return tuple(tool.name for tool in self.tools)

    @property
    def support_packages(self) -> tuple[str, ...]:
        """Referenced packages that are not declared tools.

        They are resolved so expressions can use their path, but they never
        join the search path.
        """

        names = set(self.tool_names)
        return tuple(ref for ref in self.package_refs if ref not in names)


class ResolvedTool(BaseModel):
    """A tool reference bound to a concrete installation."""

    model_config = ConfigDict(frozen=True)

    reference: ToolReference
    version: str = Field(..., min_length=1)
    path: str = Field(
        ...,
        min_length=1,
        description="Absolute, content-addressed installation path.",
    )

    @property
    def name(self) -> str:
        return self.reference.name

    @property
    def bin_dir(self) -> str:
        return str(PurePosixPath(self.path) / "bin")


class ActivationEnvironment(BaseModel):
    """Final process environment handed to the session."""

    model_config = ConfigDict(frozen=True)

    variables: dict[str, str] = Field(default_factory=dict)
    search_path: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Composed search-path entries, tools first.",
    )
    shell_hook: str | None = None

    def as_env(self) -> dict[str, str]:
        """Plain copy suitable for `subprocess`."""

        return dict(self.variables)
