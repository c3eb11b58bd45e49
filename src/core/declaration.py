"""Declaration parser.

Reads a JSON environment descriptor:

    {
      "tools": ["rustc", "cargo>=1.70", {"name": "rustfmt", "version": "1.7"}],
      "variables": {"RUST_SRC_PATH": "{{ pkg('rust-src') }}"},
      "shell_hook": "echo ready"
    }

and produces an immutable `EnvironmentDeclaration`. Parsing has no side
effects; every failure names the offending field.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Mapping

import structlog
from jinja2 import TemplateSyntaxError

from core import expressions
from core.domain.models import EnvironmentDeclaration, ToolReference
from core.domain.versions import is_valid_name, normalize_constraint, split_tool_spec
from core.errors import DuplicateEntry, MalformedDeclaration

log = structlog.get_logger(__name__)

_TOP_LEVEL_FIELDS = ("tools", "variables", "shell_hook")
_TOOL_FIELDS = ("name", "version")
_VARIABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class _JsonObject(dict):
    """JSON object that remembers keys seen more than once."""

    def __init__(self, pairs: list[tuple[str, Any]]) -> None:
        super().__init__()
        self.duplicates: list[str] = []
        for key, value in pairs:
            if key in self and key not in self.duplicates:
                self.duplicates.append(key)
            self[key] = value


def _duplicates(obj: Mapping[str, Any]) -> list[str]:
    return list(getattr(obj, "duplicates", []))


def _parse_tool(index: int, raw: Any) -> ToolReference:
    field = f"tools[{index}]"

    if isinstance(raw, str):
        try:
            name, constraint = split_tool_spec(raw)
        except ValueError as exc:
            raise MalformedDeclaration(str(exc), field=field) from None
        return ToolReference(name=name, constraint=constraint)

    if isinstance(raw, Mapping):
        if _duplicates(raw):
            raise MalformedDeclaration(f"repeated key '{_duplicates(raw)[0]}'", field=field)
        unknown = [key for key in raw if key not in _TOOL_FIELDS]
        if unknown:
            raise MalformedDeclaration(f"unknown key '{unknown[0]}'", field=field)
        name = raw.get("name")
        if not isinstance(name, str) or not is_valid_name(name):
            raise MalformedDeclaration("expected a valid package name", field=f"{field}.name")
        version = raw.get("version")
        if version is None:
            return ToolReference(name=name)
        if not isinstance(version, str):
            raise MalformedDeclaration("expected a string", field=f"{field}.version")
        try:
            constraint = normalize_constraint(version)
        except ValueError as exc:
            raise MalformedDeclaration(str(exc), field=f"{field}.version") from None
        return ToolReference(name=name, constraint=constraint)

    raise MalformedDeclaration("expected a string or an object", field=field)


def _parse_tools(raw: Any) -> tuple[ToolReference, ...]:
    if not isinstance(raw, list):
        raise MalformedDeclaration("expected a list of tool references", field="tools")

    tools: list[ToolReference] = []
    seen: set[str] = set()
    for index, item in enumerate(raw):
        tool = _parse_tool(index, item)
        if tool.name in seen:
            raise DuplicateEntry(field="tools", entry=tool.name)
        seen.add(tool.name)
        tools.append(tool)
    return tuple(tools)


def _parse_variables(raw: Any) -> tuple[dict[str, str], tuple[str, ...]]:
    if raw is None:
        return {}, ()
    if not isinstance(raw, Mapping):
        raise MalformedDeclaration("expected an object of name -> value", field="variables")
    if _duplicates(raw):
        raise DuplicateEntry(field="variables", entry=_duplicates(raw)[0])

    variables: dict[str, str] = {}
    refs: list[str] = []
    for name, value in raw.items():
        if not isinstance(name, str):
            raise MalformedDeclaration("variable names must be strings", field=f"variables.{name!r}")
        field = f"variables.{name}"
        if not _VARIABLE_NAME_RE.match(name):
            raise MalformedDeclaration("invalid variable name", field=field)
        if not isinstance(value, str):
            raise MalformedDeclaration("expected a string value", field=field)
        try:
            found = expressions.package_references(value)
        except TemplateSyntaxError as exc:
            raise MalformedDeclaration(f"invalid expression: {exc.message}", field=field) from None
        except ValueError as exc:
            raise MalformedDeclaration(str(exc), field=field) from None
        for ref in found:
            if not is_valid_name(ref):
                raise MalformedDeclaration(f"invalid package name '{ref}'", field=field)
            if ref not in refs:
                refs.append(ref)
        variables[name] = value
    return variables, tuple(refs)


def parse_declaration(raw: str | bytes | Mapping[str, Any]) -> EnvironmentDeclaration:
    """Parse descriptor text (JSON) or an already-decoded mapping."""

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedDeclaration(f"not UTF-8: {exc}", field="<document>") from None

    if isinstance(raw, str):
        try:
            data = json.loads(raw, object_pairs_hook=_JsonObject)
        except json.JSONDecodeError as exc:
            raise MalformedDeclaration(
                f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}",
                field="<document>",
            ) from None
    else:
        data = raw

    if not isinstance(data, Mapping):
        raise MalformedDeclaration("expected a JSON object", field="<document>")
    if _duplicates(data):
        raise MalformedDeclaration("field given more than once", field=_duplicates(data)[0])
    unknown = [key for key in data if key not in _TOP_LEVEL_FIELDS]
    if unknown:
        raise MalformedDeclaration("unknown field", field=str(unknown[0]))
    if "tools" not in data:
        raise MalformedDeclaration("missing required field", field="tools")

    tools = _parse_tools(data["tools"])
    variables, refs = _parse_variables(data.get("variables"))

    shell_hook = data.get("shell_hook")
    if shell_hook is not None and not isinstance(shell_hook, str):
        raise MalformedDeclaration("expected a string", field="shell_hook")

    return EnvironmentDeclaration(
        tools=tools,
        variables=variables,
        shell_hook=shell_hook or None,
        package_refs=refs,
    )


def load_declaration(path: Path) -> EnvironmentDeclaration:
    """Read and parse a descriptor file."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MalformedDeclaration(f"cannot read file: {exc.strerror or exc}", field=str(path)) from None
    except UnicodeDecodeError as exc:
        raise MalformedDeclaration(f"not UTF-8: {exc}", field=str(path)) from None

    declaration = parse_declaration(text)
    log.debug(
        "declaration_loaded",
        path=str(path),
        tools=[str(tool) for tool in declaration.tools],
        variables=list(declaration.variables),
    )
    return declaration
