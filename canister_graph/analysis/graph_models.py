"""Data models for the dependency graph and the analysis report."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from canister_graph.models import Finding, Unit, UnitStats


@dataclass(frozen=True)
class DependencyEdge:
    source: str  # the dependent unit
    target: str  # the unit it depends on
    edge_type: str = "explicit"  # "explicit" | "import"


@dataclass
class DependencyGraph:
    """Index-based adjacency over an arena of unit names.

    Vertex ``i`` is ``names[i]``; ``dependencies[i]`` lists the vertices it
    depends on and ``dependents[i]`` the vertices depending on it.
    """
    names: list[str] = field(default_factory=list)
    index: dict[str, int] = field(default_factory=dict)
    dependencies: list[list[int]] = field(default_factory=list)
    dependents: list[list[int]] = field(default_factory=list)
    edges: list[DependencyEdge] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.index

    def add_vertex(self, name: str) -> int:
        idx = len(self.names)
        self.names.append(name)
        self.index[name] = idx
        self.dependencies.append([])
        self.dependents.append([])
        return idx

    def add_edge(self, source: str, target: str, edge_type: str = "explicit") -> bool:
        """Add ``source -> target``; returns False if the edge already exists."""
        s, t = self.index[source], self.index[target]
        if t in self.dependencies[s]:
            return False
        self.dependencies[s].append(t)
        self.dependents[t].append(s)
        self.edges.append(DependencyEdge(source=source, target=target, edge_type=edge_type))
        return True

    def dependencies_of(self, name: str) -> list[str]:
        return [self.names[i] for i in self.dependencies[self.index[name]]]

    def dependents_of(self, name: str) -> list[str]:
        return [self.names[i] for i in self.dependents[self.index[name]]]


@dataclass
class TransitiveDeps:
    root: str
    direct: list[str] = field(default_factory=list)
    all_transitive: list[str] = field(default_factory=list)
    dependents: list[str] = field(default_factory=list)
    depth: int | None = None


@dataclass
class AnalysisReport:
    """Everything one ``analyze`` call learned about a project."""
    units: list[Unit]
    graph: DependencyGraph
    cycles: list[list[str]] = field(default_factory=list)
    build_order: list[str] = field(default_factory=list)
    blocked: list[str] = field(default_factory=list)
    errors: list[Finding] = field(default_factory=list)
    warnings: list[Finding] = field(default_factory=list)
    unit_stats: dict[str, UnitStats] = field(default_factory=dict)

    @property
    def deployable(self) -> bool:
        return not self.errors

    @property
    def total_lines_of_code(self) -> int:
        return sum(self.stats_for(u.name).lines_of_code for u in self.units)

    def stats_for(self, name: str) -> UnitStats:
        return self.unit_stats.get(name) or UnitStats()

    def to_dict(self) -> dict:
        by_kind: dict[str, int] = {}
        for unit in self.units:
            by_kind[unit.kind.value] = by_kind.get(unit.kind.value, 0) + 1

        units = []
        for unit in self.units:
            stats = self.stats_for(unit.name)
            entry: dict = {
                "name": unit.name,
                "kind": unit.kind.value,
                "dependsOn": self.graph.dependencies_of(unit.name),
                "dependents": self.graph.dependents_of(unit.name),
                "linesOfCode": stats.lines_of_code,
                "sourceFiles": list(stats.source_files),
            }
            if unit.main:
                entry["main"] = unit.main
            if unit.candid:
                entry["candid"] = unit.candid
            units.append(entry)

        return {
            "units": units,
            "edges": [
                {"from": e.source, "to": e.target, "type": e.edge_type}
                for e in self.graph.edges
            ],
            "errors": [f.to_dict() for f in self.errors],
            "warnings": [f.to_dict() for f in self.warnings],
            "cycles": [list(c) for c in self.cycles],
            "buildOrder": list(self.build_order),
            "blocked": list(self.blocked),
            "stats": {
                "unitCount": len(self.units),
                "edgeCount": len(self.graph.edges),
                "cycleCount": len(self.cycles),
                "totalLinesOfCode": self.total_lines_of_code,
                "byKind": dict(sorted(by_kind.items())),
            },
            "deployable": self.deployable,
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
