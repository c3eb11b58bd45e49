"""Tests for the environment assembler."""

from __future__ import annotations

import pytest

from core import expressions
from core.assembler import assemble, compose_search_path
from core.declaration import parse_declaration
from core.domain.models import ResolvedTool, ToolReference
from core.errors import MalformedDeclaration, UnresolvedReference


def _tool(name: str, path: str, version: str = "1.0") -> ResolvedTool:
    return ResolvedTool(reference=ToolReference(name=name), version=version, path=path)


class TestAssemble:
    def test_reference_example(self) -> None:
        d = parse_declaration({"tools": ["a", "b"], "variables": {"X": "1"}})
        env = assemble(d, [_tool("a", "/p/a"), _tool("b", "/p/b")], {"PATH": "/usr/bin:/bin"})
        assert env.variables["PATH"].startswith("/p/a/bin:/p/b/bin:")
        assert env.variables["PATH"] == "/p/a/bin:/p/b/bin:/usr/bin:/bin"
        assert env.variables["X"] == "1"

    def test_search_path_has_one_entry_per_tool_plus_inherited(self) -> None:
        d = parse_declaration({"tools": ["a", "b", "c"]})
        tools = [_tool("a", "/p/a"), _tool("b", "/p/b"), _tool("c", "/p/c")]
        env = assemble(d, tools, {"PATH": "/usr/bin:/bin"})
        assert len(env.search_path) == 3 + 2
        assert env.search_path[:3] == ("/p/a/bin", "/p/b/bin", "/p/c/bin")

    def test_order_follows_declaration_not_resolution(self) -> None:
        d = parse_declaration({"tools": ["b", "a"]})
        env = assemble(d, [_tool("a", "/p/a"), _tool("b", "/p/b")])
        assert env.search_path == ("/p/b/bin", "/p/a/bin")

    def test_no_inherited_path(self) -> None:
        d = parse_declaration({"tools": ["a"]})
        env = assemble(d, [_tool("a", "/p/a")])
        assert env.variables["PATH"] == "/p/a/bin"

    def test_declared_variables_override_inherited(self) -> None:
        d = parse_declaration({"tools": [], "variables": {"LANG": "C"}})
        env = assemble(d, [], {"LANG": "en_US.UTF-8", "HOME": "/home/u"})
        assert env.variables["LANG"] == "C"
        assert env.variables["HOME"] == "/home/u"

    def test_declared_path_is_merged_not_replacing(self) -> None:
        d = parse_declaration({"tools": ["a"], "variables": {"PATH": "/opt/extra/bin"}})
        env = assemble(d, [_tool("a", "/p/a")], {"PATH": "/usr/bin"})
        assert env.search_path == ("/p/a/bin", "/opt/extra/bin", "/usr/bin")
        assert env.variables["PATH"] == "/p/a/bin:/opt/extra/bin:/usr/bin"

    def test_inherited_mapping_not_mutated(self) -> None:
        inherited = {"PATH": "/usr/bin", "X": "old"}
        d = parse_declaration({"tools": ["a"], "variables": {"X": "new"}})
        assemble(d, [_tool("a", "/p/a")], inherited)
        assert inherited == {"PATH": "/usr/bin", "X": "old"}

    def test_referentially_transparent(self) -> None:
        d = parse_declaration({"tools": ["a", "b"], "variables": {"X": "1", "Y": "{{ pkg('a') }}/share"}})
        tools = [_tool("a", "/p/a"), _tool("b", "/p/b")]
        inherited = {"PATH": "/usr/bin", "HOME": "/home/u"}
        first = assemble(d, tools, inherited)
        second = assemble(d, tools, inherited)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_support_package_rendered_but_not_on_path(self) -> None:
        d = parse_declaration(
            {
                "tools": ["rustc"],
                "variables": {"RUST_SRC_PATH": "{{ pkg('rust-src') }}/lib/rustlib/src/rust/library"},
            }
        )
        env = assemble(
            d,
            [_tool("rustc", "/store/r")],
            {},
            support=[_tool("rust-src", "/store/src")],
        )
        assert env.variables["RUST_SRC_PATH"] == "/store/src/lib/rustlib/src/rust/library"
        assert env.search_path == ("/store/r/bin",)

    def test_plain_values_pass_through_verbatim(self) -> None:
        d = parse_declaration({"tools": [], "variables": {"PS1": "$ ${HOME} %s\n"}})
        env = assemble(d, [])
        assert env.variables["PS1"] == "$ ${HOME} %s\n"

    def test_shell_hook_carried(self) -> None:
        d = parse_declaration({"tools": [], "shell_hook": "echo hi"})
        assert assemble(d, []).shell_hook == "echo hi"


class TestUnresolved:
    def test_missing_tool(self) -> None:
        d = parse_declaration({"tools": ["a", "b"]})
        with pytest.raises(UnresolvedReference) as excinfo:
            assemble(d, [_tool("a", "/p/a")])
        assert excinfo.value.name == "b"

    def test_missing_support_package(self) -> None:
        d = parse_declaration({"tools": [], "variables": {"S": "{{ pkg('src') }}"}})
        with pytest.raises(UnresolvedReference) as excinfo:
            assemble(d, [])
        assert excinfo.value.name == "src"


class TestExpressionErrors:
    @pytest.mark.parametrize("expression", ["{{ pkg('a').nope }}", "{{ pkg('a') + 1 }}"])
    def test_evaluation_failure_names_variable(self, expression: str) -> None:
        d = parse_declaration({"tools": ["a"], "variables": {"X": expression}})
        with pytest.raises(MalformedDeclaration) as excinfo:
            assemble(d, [_tool("a", "/p/a")])
        assert excinfo.value.field == "variables.X"
        assert excinfo.value.exit_code == 2

    def test_render_keeps_missing_package_unresolved(self) -> None:
        with pytest.raises(UnresolvedReference) as excinfo:
            expressions.render("{{ pkg('a') ~ '/lib' }}", {}, field="variables.X")
        assert excinfo.value.name == "a"


def test_compose_search_path_skips_empty_entries() -> None:
    assert compose_search_path([_tool("a", "/p/a")], None, "/usr/bin::/bin:") == (
        "/p/a/bin",
        "/usr/bin",
        "/bin",
    )
