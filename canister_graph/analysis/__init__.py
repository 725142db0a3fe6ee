"""Dependency analysis: graph building, cycle detection and build ordering."""

from canister_graph.analysis.build_order import order
from canister_graph.analysis.dependency_graph import DependencyGraphBuilder
from canister_graph.analysis.graph_models import (
    AnalysisReport,
    DependencyEdge,
    DependencyGraph,
    TransitiveDeps,
)
from canister_graph.analysis.project import analyze, validate_units

__all__ = [
    "AnalysisReport",
    "DependencyEdge",
    "DependencyGraph",
    "DependencyGraphBuilder",
    "TransitiveDeps",
    "analyze",
    "order",
    "validate_units",
]
