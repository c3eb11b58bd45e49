"""Variable value expressions.

A declared value may reference resolved packages with Jinja2 syntax:

    "RUST_SRC_PATH": "{{ pkg('rust-src') }}/lib/rustlib/src/rust/library"

`pkg(name)` is the only name available. Values without template markup are
passed through verbatim. References are collected from the parsed template
(not by rendering it) so the resolver knows which packages to fetch before
anything is evaluated.
"""

from __future__ import annotations

from typing import Mapping

from jinja2 import StrictUndefined, TemplateError, meta, nodes
from jinja2.sandbox import SandboxedEnvironment

from core.errors import MalformedDeclaration, UnresolvedReference

PACKAGE_FUNCTION = "pkg"

_MARKERS = ("{{", "{%", "{#")

_env = SandboxedEnvironment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def has_markup(value: str) -> bool:
    return any(marker in value for marker in _MARKERS)


def package_references(value: str) -> list[str]:
    """Package names referenced by `value`, in order of first appearance.

    Raises `jinja2.TemplateSyntaxError` for broken templates and ValueError
    for names other than `pkg` or non-literal `pkg()` arguments.
    """

    if not has_markup(value):
        return []

    tree = _env.parse(value)
    unknown = meta.find_undeclared_variables(tree) - {PACKAGE_FUNCTION}
    if unknown:
        raise ValueError(f"unknown name(s) in expression: {', '.join(sorted(unknown))}")

    refs: list[str] = []
    for call in tree.find_all(nodes.Call):
        if not (isinstance(call.node, nodes.Name) and call.node.name == PACKAGE_FUNCTION):
            continue
        args_ok = (
            len(call.args) == 1
            and not call.kwargs
            and call.dyn_args is None
            and call.dyn_kwargs is None
            and isinstance(call.args[0], nodes.Const)
            and isinstance(call.args[0].value, str)
        )
        if not args_ok:
            raise ValueError("pkg() takes exactly one string literal")
        name = call.args[0].value
        if name not in refs:
            refs.append(name)
    return refs


def render(value: str, packages: Mapping[str, str], *, field: str = "<expression>") -> str:
    """Evaluate `value` with `pkg()` bound to `packages` (name -> path).

    Evaluation failures (bad attribute, type mismatch) raise
    `MalformedDeclaration` naming `field`; a missing package stays an
    `UnresolvedReference`.
    """

    if not has_markup(value):
        return value

    def pkg(name: str) -> str:
        try:
            return packages[name]
        except KeyError:
            raise UnresolvedReference(name) from None

    try:
        return _env.from_string(value).render(pkg=pkg)
    except UnresolvedReference:
        raise
    except (TemplateError, TypeError, ValueError) as exc:
        raise MalformedDeclaration(f"cannot evaluate expression: {exc}", field=field) from None
