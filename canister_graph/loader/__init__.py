"""Project loading: manifest parsing, source statistics and import detection."""

from __future__ import annotations

from canister_graph.loader.imports import (
    detect_import_dependencies,
    parse_cargo_dependencies,
    parse_motoko_imports,
)
from canister_graph.loader.issues import detect_project_issues
from canister_graph.loader.manifest import (
    MANIFEST_NAME,
    ProjectManifest,
    detect_kind,
    load_project,
    units_from_manifest,
)
from canister_graph.loader.sources import collect_unit_stats, count_lines

__all__ = [
    "MANIFEST_NAME",
    "ProjectManifest",
    "collect_unit_stats",
    "count_lines",
    "detect_import_dependencies",
    "detect_kind",
    "detect_project_issues",
    "load_project",
    "parse_cargo_dependencies",
    "parse_motoko_imports",
    "units_from_manifest",
]
