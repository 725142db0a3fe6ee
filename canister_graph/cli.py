"""Click CLI with analyze, order, deps, and serve subcommands."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from canister_graph import __version__
from canister_graph.analysis.dependency_graph import DependencyGraphBuilder
from canister_graph.errors import MalformedInputError, ProjectConfigError, UnknownUnitError
from canister_graph.models import AnalyzerConfig, Severity
from canister_graph.pipeline import ProjectAnalysis, run_analysis

_PROJECT_DIR = click.Path(exists=True, file_okay=False, path_type=Path)

_SEVERITY_STYLE = {
    Severity.ERROR: ("error", "red"),
    Severity.WARNING: ("warning", "yellow"),
}


def _run(project_dir: Path, include_imports: bool = True) -> ProjectAnalysis:
    config = AnalyzerConfig(project_dir=project_dir, include_imports=include_imports)
    try:
        return run_analysis(config)
    except (ProjectConfigError, MalformedInputError) as e:
        raise click.ClickException(str(e))


def _severity_label(severity: Severity) -> str:
    label, color = _SEVERITY_STYLE[severity]
    return click.style(f"{label:>7}", fg=color)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr")
def cli(verbose: bool):
    """canister-graph: dependency analysis for multi-canister projects."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("project_dir", type=_PROJECT_DIR, default=".")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option("--imports/--no-imports", default=True, help="Detect dependencies from source imports")
@click.option("--strict", is_flag=True, help="Exit with status 1 when the project is not deployable")
def analyze(project_dir: Path, as_json: bool, imports: bool, strict: bool):
    """Analyze canisters, dependencies and build order of a project."""
    result = _run(project_dir, include_imports=imports)
    report = result.report

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_analysis(result)

    if strict and not report.deployable:
        raise SystemExit(1)


def _print_analysis(result: ProjectAnalysis) -> None:
    manifest, report = result.manifest, result.report

    click.echo(click.style(f"\nProject: {manifest.name}", bold=True))
    click.echo(f"  Location: {manifest.path}")
    click.echo(f"  dfx version: {manifest.dfx_version or 'not specified'}")
    click.echo(f"  Canisters: {len(report.units)}")
    click.echo(f"  Total lines of code: {report.total_lines_of_code}")
    if manifest.networks:
        click.echo(f"  Networks: {', '.join(manifest.networks)}")

    click.echo(click.style("\nCanisters:", bold=True))
    for unit in report.units:
        stats = report.stats_for(unit.name)
        deps = report.graph.dependencies_of(unit.name)
        click.echo(
            f"  {click.style(unit.name, fg='cyan')} ({unit.kind.value})  "
            f"{click.style(f'{len(stats.source_files)} files, {stats.lines_of_code} lines', dim=True)}"
        )
        if unit.main:
            click.echo(f"      main: {unit.main}")
        if deps:
            click.echo(f"      depends on: {', '.join(deps)}")

    if report.cycles:
        click.echo(click.style("\nCircular dependencies:", fg="red", bold=True))
        for cycle in report.cycles:
            click.echo("  " + " -> ".join([*cycle, cycle[0]]))

    click.echo(click.style("\nBuild order:", bold=True))
    if report.build_order:
        click.echo("  " + " -> ".join(report.build_order))
    else:
        click.echo("  Cannot determine (circular dependencies exist)" if report.cycles else "  (empty)")
    if report.blocked:
        click.echo(f"  Blocked by cycles: {', '.join(report.blocked)}")

    findings = [*report.errors, *report.warnings]
    if findings or result.issues:
        click.echo(click.style("\nIssues:", bold=True))
        for finding in findings:
            click.echo(f"  {_severity_label(finding.severity)}  {finding.detail}")
        for issue in result.issues:
            click.echo(f"  {_severity_label(issue.severity)}  {issue.message}")
    else:
        click.echo(click.style("\nNo issues detected", fg="green"))

    status = click.style("yes", fg="green") if report.deployable else click.style("no", fg="red")
    click.echo(f"\nDeployable: {status}\n")


@cli.command()
@click.argument("project_dir", type=_PROJECT_DIR, default=".")
@click.option("--imports/--no-imports", default=True, help="Detect dependencies from source imports")
def order(project_dir: Path, imports: bool):
    """Print the build order, one canister per line."""
    report = _run(project_dir, include_imports=imports).report
    for name in report.build_order:
        click.echo(name)
    if report.cycles:
        click.echo(
            f"{len(report.cycles)} cycle(s) found; "
            f"{len(report.units) - len(report.build_order)} canister(s) left out",
            err=True,
        )


@cli.command()
@click.argument("project_dir", type=_PROJECT_DIR)
@click.argument("unit")
@click.option("--imports/--no-imports", default=True, help="Detect dependencies from source imports")
def deps(project_dir: Path, unit: str, imports: bool):
    """Show direct and transitive dependencies of one canister."""
    report = _run(project_dir, include_imports=imports).report
    try:
        result = DependencyGraphBuilder().resolve_transitive(report.graph, unit)
    except UnknownUnitError as e:
        raise click.ClickException(str(e))

    click.echo(click.style(result.root, fg="cyan", bold=True))
    click.echo(f"  direct: {', '.join(result.direct) or '(none)'}")
    click.echo(f"  transitive: {', '.join(result.all_transitive) or '(none)'}")
    click.echo(f"  dependents: {', '.join(result.dependents) or '(none)'}")
    depth = "n/a (circular)" if result.depth is None else str(result.depth)
    click.echo(f"  depth: {depth}")


@cli.command()
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(port: int, host: str):
    """Start the web API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the web API. "
            "Install with: pip install 'canister-graph[web]'"
        )

    from canister_graph.web.app import create_app

    click.echo(f"Starting canister-graph API at http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
