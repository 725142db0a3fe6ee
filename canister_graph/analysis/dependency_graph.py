"""Dependency graph builder: builds the graph from Units, validates references, detects cycles."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Sequence

from canister_graph.errors import UnknownUnitError
from canister_graph.models import Finding, FindingKind, Severity, Unit
from canister_graph.analysis.build_order import order
from canister_graph.analysis.graph_models import DependencyGraph, TransitiveDeps

_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


def _unique(names: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


class DependencyGraphBuilder:
    """Build a dependency graph from a unit registry."""

    def build(self, units: Sequence[Unit]) -> tuple[DependencyGraph, list[Finding]]:
        graph = DependencyGraph()
        errors: list[Finding] = []

        # Step 1: One vertex per unit, in declaration order
        for unit in units:
            graph.add_vertex(unit.name)

        # Step 2: Explicit edges; unknown names are reported and dropped
        for unit in units:
            for dep in _unique(unit.depends_on):
                if dep not in graph:
                    errors.append(Finding(
                        kind=FindingKind.UNDEFINED_DEPENDENCY,
                        severity=Severity.ERROR,
                        detail=f'Canister "{unit.name}" depends on unknown canister "{dep}"',
                        unit=unit.name,
                        missing_name=dep,
                    ))
                    continue
                graph.add_edge(unit.name, dep, "explicit")

        # Step 3: Import-derived edges not already declared
        for unit in units:
            for dep in _unique(unit.import_depends_on):
                if dep in graph:
                    graph.add_edge(unit.name, dep, "import")

        return graph, errors

    def detect_cycles(self, graph: DependencyGraph) -> list[list[str]]:
        """Detect cycles with a three-state DFS over vertices in declaration order.

        Each edge into a vertex still on the DFS stack yields the stack slice
        from that vertex to the current one. The first name is not repeated
        at the end; a self-dependency yields a one-element cycle.
        """
        n = len(graph)
        state = [_UNVISITED] * n
        stack_pos = [-1] * n
        path: list[int] = []
        cycles: list[list[str]] = []

        for start in range(n):
            if state[start] != _UNVISITED:
                continue

            state[start] = _IN_PROGRESS
            stack_pos[start] = 0
            path.append(start)
            frames = [(start, iter(graph.dependencies[start]))]

            while frames:
                node, neighbors = frames[-1]
                for nxt in neighbors:
                    if state[nxt] == _UNVISITED:
                        state[nxt] = _IN_PROGRESS
                        stack_pos[nxt] = len(path)
                        path.append(nxt)
                        frames.append((nxt, iter(graph.dependencies[nxt])))
                        break
                    if state[nxt] == _IN_PROGRESS:
                        cycles.append([graph.names[i] for i in path[stack_pos[nxt]:]])
                else:
                    frames.pop()
                    path.pop()
                    state[node] = _DONE
                    stack_pos[node] = -1

        return cycles

    def collect_dependents(self, graph: DependencyGraph, seeds: Iterable[str]) -> set[str]:
        """Return every unit that transitively depends on one of ``seeds``."""
        seen = {graph.index[s] for s in seeds if s in graph}
        queue = deque(seen)
        while queue:
            current = queue.popleft()
            for dependent in graph.dependents[current]:
                if dependent not in seen:
                    seen.add(dependent)
                    queue.append(dependent)
        return {graph.names[i] for i in seen}

    def cycle_affected(self, graph: DependencyGraph) -> set[str]:
        """Cycle members plus every unit depending on one of them."""
        members = {name for cycle in self.detect_cycles(graph) for name in cycle}
        return self.collect_dependents(graph, members)

    def resolve_transitive(self, graph: DependencyGraph, root: str) -> TransitiveDeps:
        """BFS to find all transitive dependencies of ``root``."""
        if root not in graph:
            raise UnknownUnitError(root)

        result = TransitiveDeps(
            root=root,
            direct=graph.dependencies_of(root),
            dependents=graph.dependents_of(root),
        )

        root_idx = graph.index[root]
        visited = {root_idx}
        queue = deque([root_idx])
        while queue:
            current = queue.popleft()
            for neighbor in graph.dependencies[current]:
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)

        visited.discard(root_idx)
        result.all_transitive = sorted(graph.names[i] for i in visited)
        result.depth = self.dependency_depth(graph, root)
        return result

    def dependency_depth(
        self,
        graph: DependencyGraph,
        name: str,
        excluded: set[str] | None = None,
    ) -> int | None:
        """Longest dependency chain below ``name``; None when a cycle is involved."""
        if name not in graph:
            raise UnknownUnitError(name)
        if excluded is None:
            excluded = self.cycle_affected(graph)
        if name in excluded:
            return None

        depths: dict[int, int] = {}
        for unit in order(graph, excluded):
            idx = graph.index[unit]
            depths[idx] = 1 + max((depths[d] for d in graph.dependencies[idx]), default=-1)
            if unit == name:
                return depths[idx]
        return None
