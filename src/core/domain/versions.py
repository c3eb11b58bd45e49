"""Version strings and constraint matching.

Versions are dotted strings (`1.75.0`, `2024.1-rc1`). Components are compared
one by one: numeric components numerically, others lexically. A textual
component sorts before a numeric one and before the end of the version, so
`1.0.rc1` precedes `1.0.0` and `1.75-beta` precedes `1.75`.

Constraints are comma-separated clauses of `<op><version>` with op in
`== != >= <= > <`. `==1.75` matches `1.75` and every `1.75.x`.
"""

from __future__ import annotations

import re
from typing import Iterable

_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.+-]*$")
_SPEC_RE = re.compile(r"^(?P<name>[A-Za-z0-9_][A-Za-z0-9_.+-]*?)\s*(?P<constraint>(?:==|!=|>=|<=|>|<).*)?$")
_CLAUSE_RE = re.compile(r"^(?P<op>==|!=|>=|<=|>|<)\s*(?P<version>[0-9A-Za-z][0-9A-Za-z._+-]*)$")
_SPLIT_RE = re.compile(r"[.+-]")

VersionKey = tuple[tuple[int, int, str], ...]

_END = (0, 0, "")


def is_valid_name(name: str) -> bool:
    return bool(_NAME_RE.match(name))


def _components(version: str) -> VersionKey:
    parts: list[tuple[int, int, str]] = []
    for part in _SPLIT_RE.split(version.strip()):
        if not part:
            continue
        if part.isdigit():
            parts.append((1, int(part), ""))
        else:
            parts.append((-1, 0, part))
    return tuple(parts)


def version_key(version: str) -> VersionKey:
    """Sort key; the end marker ranks `1.75` above `1.75-beta` and below `1.75.0`."""

    return (*_components(version), _END)


def split_tool_spec(spec: str) -> tuple[str, str | None]:
    """Split `"rustc>=1.70"` into `("rustc", ">=1.70")`.

    Raises ValueError when the name or the constraint is malformed.
    """

    match = _SPEC_RE.match(spec.strip())
    if not match:
        raise ValueError(f"invalid tool reference '{spec}'")
    constraint = match.group("constraint")
    if constraint is None:
        return match.group("name"), None
    return match.group("name"), normalize_constraint(constraint)


def _parse_clauses(constraint: str) -> list[tuple[str, str]]:
    clauses: list[tuple[str, str]] = []
    for raw in constraint.split(","):
        clause = raw.strip()
        if not clause:
            raise ValueError(f"empty clause in constraint '{constraint}'")
        if not clause.startswith(("=", "!", ">", "<")):
            clause = "==" + clause
        match = _CLAUSE_RE.match(clause)
        if not match:
            raise ValueError(f"invalid version constraint '{constraint}'")
        clauses.append((match.group("op"), match.group("version")))
    return clauses


def normalize_constraint(constraint: str) -> str:
    """Validate a constraint and return its canonical spelling.

    A bare version (`1.75`) is read as `==1.75`.
    """

    return ",".join(f"{op}{version}" for op, version in _parse_clauses(constraint))


def _prefix_equal(version: str, wanted: str) -> bool:
    parts, prefix = _components(version), _components(wanted)
    return parts[: len(prefix)] == prefix


def _clause_matches(version: str, op: str, wanted: str) -> bool:
    key, wanted_key = version_key(version), version_key(wanted)
    if op == "==":
        return _prefix_equal(version, wanted)
    if op == "!=":
        return not _prefix_equal(version, wanted)
    if op == ">=":
        return key >= wanted_key
    if op == "<=":
        return key <= wanted_key or _prefix_equal(version, wanted)
    if op == ">":
        return key > wanted_key and not _prefix_equal(version, wanted)
    if op == "<":
        return key < wanted_key
    raise ValueError(f"unknown operator '{op}'")


def satisfies(version: str, constraint: str | None) -> bool:
    if not constraint:
        return True
    return all(_clause_matches(version, op, wanted) for op, wanted in _parse_clauses(constraint))


def pick_highest(versions: Iterable[str], constraint: str | None) -> str | None:
    """Highest version that satisfies `constraint`, or None."""

    candidates = [v for v in versions if satisfies(v, constraint)]
    if not candidates:
        return None
    return max(candidates, key=version_key)
