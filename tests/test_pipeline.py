"""Tests for the full analysis pipeline and its configuration."""

import json
from pathlib import Path

import pytest

from canister_graph.errors import ProjectConfigError
from canister_graph.models import AnalyzerConfig
from canister_graph.pipeline import run_analysis

FIXTURES = Path(__file__).parent / "fixtures"
SAMPLE = FIXTURES / "sample_project"


def test_sample_project():
    result = run_analysis(AnalyzerConfig(project_dir=SAMPLE))
    report = result.report

    assert report.build_order == ["audit", "ledger", "backend", "frontend"]
    assert report.cycles == []
    assert report.deployable
    assert result.issues == []
    assert report.total_lines_of_code > 0


def test_import_edges_included():
    data = run_analysis(AnalyzerConfig(project_dir=SAMPLE)).to_dict()
    assert {"from": "backend", "to": "audit", "type": "import"} in data["edges"]
    assert {"from": "backend", "to": "ledger", "type": "explicit"} in data["edges"]
    assert {"from": "backend", "to": "ledger", "type": "import"} not in data["edges"]


def test_imports_disabled():
    config = AnalyzerConfig(project_dir=SAMPLE, include_imports=False)
    data = run_analysis(config).to_dict()
    assert all(e["type"] == "explicit" for e in data["edges"])
    assert len(data["edges"]) == 2


def test_project_fields_in_dict():
    data = run_analysis(AnalyzerConfig(project_dir=SAMPLE)).to_dict()
    assert data["project"] == "sample_project"
    assert data["dfxVersion"] == "0.15.1"
    assert data["networks"] == ["local"]
    assert data["issues"] == []
    json.dumps(data)


def test_single_worker_matches_pool():
    one = run_analysis(AnalyzerConfig(project_dir=SAMPLE, max_workers=1))
    many = run_analysis(AnalyzerConfig(project_dir=SAMPLE, max_workers=8))
    assert one.report.to_json() == many.report.to_json()


def test_progress_callback():
    stages = []
    run_analysis(
        AnalyzerConfig(project_dir=SAMPLE),
        progress=lambda stage, current, total: stages.append((stage, current, total)),
    )
    assert ("Loading", 1, 1) in stages
    assert ("Inspecting", 4, 4) in stages
    assert stages[-1] == ("Analyzing", 1, 1)


def test_missing_manifest(tmp_path):
    with pytest.raises(ProjectConfigError):
        run_analysis(AnalyzerConfig(project_dir=tmp_path))


def test_cycle_project(tmp_path):
    (tmp_path / "dfx.json").write_text(json.dumps({
        "dfx": "0.15.1",
        "canisters": {
            "a": {"type": "custom", "dependencies": ["b"]},
            "b": {"type": "custom", "dependencies": ["a"]},
            "c": {"type": "custom"},
        },
    }), encoding="utf-8")
    report = run_analysis(AnalyzerConfig(project_dir=tmp_path)).report
    assert report.cycles == [["a", "b"]]
    assert report.build_order == ["c"]
    assert not report.deployable


# ── Config ────────────────────────────────────────────────────

class TestAnalyzerConfig:
    def test_defaults(self, monkeypatch):
        for var in ("CANISTER_GRAPH_MAX_WORKERS", "CANISTER_GRAPH_TIMEOUT", "CANISTER_GRAPH_CACHE_TTL"):
            monkeypatch.delenv(var, raising=False)
        config = AnalyzerConfig()
        assert config.project_dir == Path(".")
        assert config.max_workers == 4
        assert config.timeout == 30.0
        assert config.cache_ttl == 900

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CANISTER_GRAPH_MAX_WORKERS", "2")
        monkeypatch.setenv("CANISTER_GRAPH_TIMEOUT", "1.5")
        config = AnalyzerConfig()
        assert config.max_workers == 2
        assert config.timeout == 1.5

    def test_invalid_env_falls_back(self, monkeypatch):
        monkeypatch.setenv("CANISTER_GRAPH_MAX_WORKERS", "lots")
        assert AnalyzerConfig().max_workers == 4

    def test_explicit_values_win(self, monkeypatch):
        monkeypatch.setenv("CANISTER_GRAPH_MAX_WORKERS", "2")
        config = AnalyzerConfig(project_dir="proj", max_workers=6)
        assert config.max_workers == 6
        assert config.project_dir == Path("proj")
