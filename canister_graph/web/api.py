"""Analysis API: project analysis, inline unit analysis, dependency queries."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from canister_graph import __version__
from canister_graph.analysis.dependency_graph import DependencyGraphBuilder
from canister_graph.analysis.project import analyze
from canister_graph.errors import MalformedInputError, ProjectConfigError, UnknownUnitError
from canister_graph.models import AnalyzerConfig, Unit, UnitKind, UnitStats
from canister_graph.pipeline import run_analysis
from canister_graph.web.state import ReportSession, cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
_builder = DependencyGraphBuilder()


# --- Request models ---

class AnalyzeRequest(BaseModel):
    path: str
    include_imports: bool = True
    refresh: bool = False


class UnitModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    kind: UnitKind = UnitKind.CUSTOM
    depends_on: list[str] = Field(default_factory=list, alias="dependsOn")
    main: str | None = None
    candid: str | None = None


class UnitStatsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lines_of_code: int = Field(0, ge=0, alias="linesOfCode")
    source_files: list[str] = Field(default_factory=list, alias="sourceFiles")


class UnitsRequest(BaseModel):
    units: list[UnitModel]
    stats: dict[str, UnitStatsModel] = Field(default_factory=dict)


class DepsRequest(BaseModel):
    report_id: str
    unit: str


# --- Helpers ---

async def _with_timeout(func, *args):
    """Run blocking ``func`` in a thread; a timeout discards its result."""
    timeout = AnalyzerConfig().timeout
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Analysis timed out after %.1fs", timeout)
        raise HTTPException(504, f"Analysis timed out after {timeout:g}s")
    except (MalformedInputError, ProjectConfigError) as e:
        raise HTTPException(400, str(e))


def _session_response(session: ReportSession, cached: bool = False) -> dict:
    return {"report_id": session.id, "cached": cached, **session.payload}


# --- Endpoints ---

@router.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


@router.post("/analyze")
async def analyze_project(req: AnalyzeRequest):
    project_dir = Path(req.path).expanduser().resolve()
    if not project_dir.is_dir():
        raise HTTPException(404, f"Path not found: {project_dir}")

    source = str(project_dir)
    if not req.refresh:
        cached = cache.find_by_source(source)
        if cached:
            return _session_response(cached, cached=True)

    config = AnalyzerConfig(project_dir=project_dir, include_imports=req.include_imports)
    result = await _with_timeout(run_analysis, config)

    session = ReportSession(report=result.report, payload=result.to_dict(), source=source)
    cache.store(session)
    return _session_response(session)


@router.post("/analyze/units")
async def analyze_units(req: UnitsRequest):
    units = [
        Unit(
            name=u.name,
            kind=u.kind,
            depends_on=tuple(u.depends_on),
            main=u.main,
            candid=u.candid,
        )
        for u in req.units
    ]
    stats = {
        name: UnitStats(lines_of_code=s.lines_of_code, source_files=tuple(s.source_files))
        for name, s in req.stats.items()
    }

    report = await _with_timeout(analyze, units, stats)
    session = ReportSession(report=report, payload=report.to_dict())
    cache.store(session)
    return _session_response(session)


@router.get("/reports/{report_id}")
async def get_report(report_id: str):
    session = cache.get(report_id)
    if not session:
        raise HTTPException(404, "Report not found or expired")
    return _session_response(session, cached=True)


@router.delete("/reports/{report_id}")
async def delete_report(report_id: str):
    if not cache.delete(report_id):
        raise HTTPException(404, "Report not found or expired")
    return {"deleted": report_id}


@router.post("/deps")
async def get_deps(req: DepsRequest):
    session = cache.get(req.report_id)
    if not session:
        raise HTTPException(404, "Report not found or expired")

    try:
        result = _builder.resolve_transitive(session.report.graph, req.unit)
    except UnknownUnitError as e:
        raise HTTPException(404, str(e))

    return {
        "unit": result.root,
        "direct": result.direct,
        "all_transitive": result.all_transitive,
        "dependents": result.dependents,
        "depth": result.depth,
    }
