"""Project analysis pipeline: load -> inspect units -> analyze."""

from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from canister_graph.analysis.graph_models import AnalysisReport
from canister_graph.analysis.project import analyze
from canister_graph.loader import (
    ProjectManifest,
    collect_unit_stats,
    detect_import_dependencies,
    detect_project_issues,
    load_project,
)
from canister_graph.models import AnalyzerConfig, ProjectIssue, Unit, UnitStats

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class ProjectAnalysis:
    """An AnalysisReport plus what the loader learned about the project."""
    manifest: ProjectManifest
    report: AnalysisReport
    issues: list[ProjectIssue] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "project": self.manifest.name,
            "path": str(self.manifest.path),
            "dfxVersion": self.manifest.dfx_version,
            "networks": list(self.manifest.networks),
            "issues": [i.to_dict() for i in self.issues],
            **self.report.to_dict(),
        }


def _inspect_unit(
    unit: Unit,
    project_dir: Path,
    known: list[str],
    include_imports: bool,
) -> tuple[Unit, UnitStats]:
    stats = collect_unit_stats(unit, project_dir)
    if include_imports:
        imported = detect_import_dependencies(unit, project_dir, known)
        if imported:
            unit = dataclasses.replace(unit, import_depends_on=imported)
    return unit, stats


def inspect_units(
    manifest: ProjectManifest,
    config: AnalyzerConfig,
    progress: ProgressCallback | None = None,
) -> tuple[list[Unit], dict[str, UnitStats]]:
    """Gather per-unit stats and imports concurrently, one task per unit.

    Results are merged only after every task has finished, in manifest order.
    """
    known = [u.name for u in manifest.units]
    inspected: dict[str, tuple[Unit, UnitStats]] = {}
    total = len(manifest.units)

    with ThreadPoolExecutor(max_workers=max(1, config.max_workers)) as pool:
        futures = {
            pool.submit(_inspect_unit, unit, manifest.path, known, config.include_imports): unit.name
            for unit in manifest.units
        }
        for future in as_completed(futures):
            inspected[futures[future]] = future.result()
            if progress:
                progress("Inspecting", len(inspected), total)

    units = [inspected[name][0] for name in known]
    stats = {name: inspected[name][1] for name in known}
    return units, stats


def run_analysis(
    config: AnalyzerConfig,
    progress: ProgressCallback | None = None,
) -> ProjectAnalysis:
    """Run the full project analysis for ``config.project_dir``."""
    if progress:
        progress("Loading", 0, 1)
    manifest = load_project(config.project_dir)
    if progress:
        progress("Loading", 1, 1)

    units, stats = inspect_units(manifest, config, progress)
    manifest.units = units

    if progress:
        progress("Analyzing", 0, 1)
    report = analyze(units, stats)
    issues = detect_project_issues(manifest, stats)
    if progress:
        progress("Analyzing", 1, 1)

    logger.info(
        "Project analyzed: %d canisters, %d LOC",
        len(units), report.total_lines_of_code,
    )
    return ProjectAnalysis(manifest=manifest, report=report, issues=issues)
