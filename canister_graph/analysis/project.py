"""Project analyzer: graph, cycles, build order and findings in one report."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from canister_graph.errors import MalformedInputError
from canister_graph.models import Finding, FindingKind, Severity, Unit, UnitKind, UnitStats
from canister_graph.analysis.build_order import order
from canister_graph.analysis.dependency_graph import DependencyGraphBuilder
from canister_graph.analysis.graph_models import AnalysisReport

logger = logging.getLogger(__name__)

_builder = DependencyGraphBuilder()


def validate_units(units: Sequence[Unit]) -> None:
    """Raise MalformedInputError unless ``units`` is a coherent registry."""
    seen: set[str] = set()
    for position, unit in enumerate(units):
        if not isinstance(unit, Unit):
            raise MalformedInputError(f"Entry {position} is not a unit: {unit!r}")
        if not isinstance(unit.name, str) or not unit.name:
            raise MalformedInputError(f"Entry {position} has no name")
        if not isinstance(unit.kind, UnitKind):
            raise MalformedInputError(f"Unit {unit.name!r} has invalid kind {unit.kind!r}")
        for field_name in ("depends_on", "import_depends_on"):
            value = getattr(unit, field_name)
            if not isinstance(value, (tuple, list)):
                raise MalformedInputError(
                    f"Unit {unit.name!r} has {field_name} of type {type(value).__name__}, "
                    "expected a list of names"
                )
        for dep in (*unit.depends_on, *unit.import_depends_on):
            if not isinstance(dep, str) or not dep:
                raise MalformedInputError(
                    f"Unit {unit.name!r} has an invalid dependency name {dep!r}"
                )
        if unit.name in seen:
            raise MalformedInputError(f"Duplicate unit name {unit.name!r}")
        seen.add(unit.name)


def analyze(
    units: Sequence[Unit],
    unit_stats: Mapping[str, UnitStats] | None = None,
) -> AnalysisReport:
    """Analyze a unit registry.

    Undefined dependencies and cycles become error-level findings but never
    stop the analysis. Units on a cycle, and every unit depending on one,
    are left out of the build order.
    """
    units = list(units)
    validate_units(units)

    graph, errors = _builder.build(units)
    cycles = _builder.detect_cycles(graph)

    members = {name for cycle in cycles for name in cycle}
    excluded = _builder.collect_dependents(graph, members)
    build_order = order(graph, excluded)

    for cycle in cycles:
        errors.append(Finding(
            kind=FindingKind.CYCLE,
            severity=Severity.ERROR,
            detail="Circular dependency: " + " -> ".join([*cycle, cycle[0]]),
            units=tuple(cycle),
        ))

    blocked = [name for name in graph.names if name in excluded and name not in members]
    warnings = [
        Finding(
            kind=FindingKind.BLOCKED_BY_CYCLE,
            severity=Severity.WARNING,
            detail=f'Canister "{name}" depends on a circular dependency and cannot be built',
            unit=name,
        )
        for name in blocked
    ]

    stats = {u.name: (unit_stats or {}).get(u.name) or UnitStats() for u in units}

    logger.info(
        "Graph built: %d nodes, %d edges, %d cycles, %d errors",
        len(graph), len(graph.edges), len(cycles), len(errors),
    )

    return AnalysisReport(
        units=units,
        graph=graph,
        cycles=cycles,
        build_order=build_order,
        blocked=blocked,
        errors=errors,
        warnings=warnings,
        unit_stats=stats,
    )
