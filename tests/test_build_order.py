"""Tests for the topological build order."""

import itertools

from canister_graph.analysis.build_order import order
from canister_graph.analysis.dependency_graph import DependencyGraphBuilder
from canister_graph.models import Unit, UnitKind


def _graph(spec):
    """``spec`` maps unit name -> list of dependency names, in declaration order."""
    units = [Unit(name=n, kind=UnitKind.RUST, depends_on=tuple(d)) for n, d in spec.items()]
    graph, _ = DependencyGraphBuilder().build(units)
    return graph


def _respects_edges(graph, result):
    position = {name: i for i, name in enumerate(result)}
    return all(
        position[e.target] < position[e.source]
        for e in graph.edges
        if e.source in position and e.target in position
    )


class TestOrder:
    def test_empty_graph(self):
        assert order(_graph({})) == []

    def test_chain(self):
        assert order(_graph({"A": [], "B": ["A"], "C": ["A", "B"]})) == ["A", "B", "C"]

    def test_smallest_ready_name_first(self):
        assert order(_graph({"z": [], "a": ["z"], "m": []})) == ["m", "z", "a"]

    def test_independent_of_declaration_order(self):
        spec = {"api": ["db"], "db": [], "web": ["api", "assets"], "assets": []}
        expected = ["assets", "db", "api", "web"]
        for names in itertools.permutations(spec):
            shuffled = {n: spec[n] for n in names}
            assert order(_graph(shuffled)) == expected

    def test_every_edge_respected(self):
        spec = {
            "a": ["b", "c"], "b": ["d"], "c": ["d", "e"],
            "d": [], "e": ["f"], "f": [], "g": ["a", "f"],
        }
        graph = _graph(spec)
        result = order(graph)
        assert sorted(result) == sorted(spec)
        assert _respects_edges(graph, result)

    def test_excluded_vertices_and_edges_removed(self):
        graph = _graph({"a": [], "b": ["a"], "c": ["b"], "d": []})
        assert order(graph, {"b"}) == ["a", "d"]

    def test_excluding_everything_gives_empty_order(self):
        graph = _graph({"a": ["b"], "b": ["a"]})
        assert order(graph, {"a", "b"}) == []

    def test_unknown_excluded_names_ignored(self):
        graph = _graph({"a": []})
        assert order(graph, {"ghost"}) == ["a"]
