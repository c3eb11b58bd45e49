"""Tests for version ordering and constraint matching."""

from __future__ import annotations

import pytest

from core.domain.versions import (
    normalize_constraint,
    pick_highest,
    satisfies,
    split_tool_spec,
    version_key,
)


class TestVersionKey:
    def test_numeric_components_compare_numerically(self) -> None:
        assert version_key("1.10.0") > version_key("1.9.3")

    def test_textual_component_sorts_before_numeric(self) -> None:
        assert version_key("1.0.rc1") < version_key("1.0.0")

    def test_shorter_prefix_sorts_first(self) -> None:
        assert version_key("1.75") < version_key("1.75.0")

    def test_prerelease_suffix_sorts_below_release(self) -> None:
        assert version_key("1.75-beta") < version_key("1.75")
        assert version_key("1.75") < version_key("1.75.0")


class TestSplitToolSpec:
    def test_bare_name(self) -> None:
        assert split_tool_spec("rustc") == ("rustc", None)

    def test_name_with_constraint(self) -> None:
        assert split_tool_spec("cargo>=1.70") == ("cargo", ">=1.70")

    def test_spaces_and_multiple_clauses(self) -> None:
        assert split_tool_spec("cargo >= 1.70, <2") == ("cargo", ">=1.70,<2")

    def test_dashed_name(self) -> None:
        assert split_tool_spec("rust-src") == ("rust-src", None)

    @pytest.mark.parametrize("spec", ["", "=rustc", "rustc=1.0", "rustc==", "rustc>=1.0,"])
    def test_invalid_specs_rejected(self, spec: str) -> None:
        with pytest.raises(ValueError):
            split_tool_spec(spec)


class TestConstraints:
    def test_bare_version_means_equality(self) -> None:
        assert normalize_constraint("1.75") == "==1.75"

    def test_equality_is_prefix_match(self) -> None:
        assert satisfies("1.75.0", "==1.75")
        assert not satisfies("1.76.0", "==1.75")

    def test_not_equal(self) -> None:
        assert not satisfies("1.75.2", "!=1.75")
        assert satisfies("1.74.0", "!=1.75")

    def test_range(self) -> None:
        assert satisfies("1.75.0", ">=1.70,<2")
        assert not satisfies("2.0.0", ">=1.70,<2")

    def test_less_equal_includes_patch_releases(self) -> None:
        assert satisfies("1.75.3", "<=1.75")

    def test_greater_excludes_same_release(self) -> None:
        assert not satisfies("1.75.3", ">1.75")
        assert satisfies("1.76.0", ">1.75")

    def test_no_constraint_accepts_anything(self) -> None:
        assert satisfies("0.0.1", None)

    @pytest.mark.parametrize("constraint", [">>1", "1.0,", "=1"])
    def test_invalid_constraint_raises_value_error(self, constraint: str) -> None:
        with pytest.raises(ValueError):
            satisfies("1.0", constraint)

    def test_prerelease_does_not_satisfy_release_floor(self) -> None:
        assert not satisfies("1.75-beta", ">=1.75")
        assert satisfies("1.75-beta", "==1.75")


class TestPickHighest:
    def test_highest_satisfying(self) -> None:
        assert pick_highest(["1.74.1", "1.75.0", "1.9.0"], ">=1.70") == "1.75.0"

    def test_none_when_unsatisfiable(self) -> None:
        assert pick_highest(["1.74.1"], ">=1.80") is None

    def test_release_preferred_over_prerelease(self) -> None:
        assert pick_highest(["1.75", "1.75-beta"], None) == "1.75"
