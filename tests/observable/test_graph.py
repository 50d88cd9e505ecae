"""Tests for DependencyGraph."""

import pytest

from reactive_chess.core.errors import ConfigurationError, CyclicDependencyError
from reactive_chess.observable.graph import DependencyGraph


class TestDependencyGraphOrder:
    def test_dependencies_come_first(self) -> None:
        graph = DependencyGraph(
            ["a"],
            {"c": ["b"], "b": ["a"], "d": ["c", "b"]},
        )
        order = graph.order
        assert order.index("b") < order.index("c") < order.index("d")

    def test_order_contains_only_derived(self) -> None:
        graph = DependencyGraph(["a", "x"], {"b": ["a"]})
        assert graph.order == ("b",)

    def test_dependents_are_transitive(self) -> None:
        graph = DependencyGraph(["a"], {"b": ["a"], "c": ["b"], "d": ["c"]})
        assert graph.dependents("a") == ("b", "c", "d")
        assert graph.dependents("c") == ("d",)

    def test_dependents_of_leaf(self) -> None:
        graph = DependencyGraph(["a"], {"b": ["a"]})
        assert graph.dependents("b") == ()
        assert graph.dependents("unknown") == ()

    def test_diamond_lists_each_dependent_once(self) -> None:
        graph = DependencyGraph(
            ["a"],
            {"left": ["a"], "right": ["a"], "top": ["left", "right"]},
        )
        deps = graph.dependents("a")
        assert sorted(deps) == ["left", "right", "top"]
        assert deps[-1] == "top"


class TestDependencyGraphValidation:
    def test_unknown_dependency(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown"):
            DependencyGraph(["a"], {"b": ["missing"]})

    def test_shadowing_primitive(self) -> None:
        with pytest.raises(ConfigurationError, match="shadow"):
            DependencyGraph(["a"], {"a": []})

    def test_cycle(self) -> None:
        with pytest.raises(CyclicDependencyError) as info:
            DependencyGraph(["a"], {"b": ["c"], "c": ["b"]})
        assert set(info.value.cycle) == {"b", "c"}

    def test_self_dependency_is_a_cycle(self) -> None:
        with pytest.raises(CyclicDependencyError):
            DependencyGraph([], {"b": ["b"]})

    def test_cycle_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            DependencyGraph(["a"], {"b": ["a", "d"], "c": ["b"], "d": ["c"]})
