"""Project-level checks that need the filesystem."""

from __future__ import annotations

from typing import Mapping

from canister_graph.models import ProjectIssue, Severity, UnitKind, UnitStats
from canister_graph.loader.manifest import ProjectManifest


def detect_project_issues(
    manifest: ProjectManifest,
    unit_stats: Mapping[str, UnitStats],
) -> list[ProjectIssue]:
    issues: list[ProjectIssue] = []

    if not manifest.dfx_version:
        issues.append(ProjectIssue(
            severity=Severity.WARNING,
            message='dfx.json missing "dfx" version field',
        ))

    for unit in manifest.units:
        stats = unit_stats.get(unit.name) or UnitStats()
        if unit.kind in (UnitKind.MOTOKO, UnitKind.RUST) and not stats.source_files:
            issues.append(ProjectIssue(
                severity=Severity.WARNING,
                message=f'Canister "{unit.name}" has no source files found',
                canisters=(unit.name,),
            ))

    for unit in manifest.units:
        if unit.main and not (manifest.path / unit.main).exists():
            issues.append(ProjectIssue(
                severity=Severity.ERROR,
                message=f'Canister "{unit.name}" main file not found: {unit.main}',
                canisters=(unit.name,),
                file=unit.main,
            ))

    return issues
