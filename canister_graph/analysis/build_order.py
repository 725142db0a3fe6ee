"""Deterministic topological build order over the acyclic part of the graph."""

from __future__ import annotations

import heapq
from typing import Collection

from canister_graph.analysis.graph_models import DependencyGraph


def order(graph: DependencyGraph, excluded: Collection[str] = ()) -> list[str]:
    """Return a build order in which every unit follows its dependencies.

    Vertices named in ``excluded`` are dropped together with their incident
    edges. Among the units whose dependencies are all placed, the
    lexicographically smallest name always goes next, so the result does not
    depend on declaration order.
    """
    skip = {graph.index[name] for name in excluded if name in graph}
    pending = [0] * len(graph)
    ready: list[tuple[str, int]] = []

    for idx, deps in enumerate(graph.dependencies):
        if idx in skip:
            continue
        pending[idx] = sum(1 for d in deps if d not in skip)
        if pending[idx] == 0:
            ready.append((graph.names[idx], idx))
    heapq.heapify(ready)

    result: list[str] = []
    while ready:
        name, idx = heapq.heappop(ready)
        result.append(name)
        for dependent in graph.dependents[idx]:
            if dependent in skip:
                continue
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, (graph.names[dependent], dependent))

    return result
