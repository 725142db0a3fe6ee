"""Tests for the web API endpoints."""

import time
from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
    from canister_graph.web.app import create_app
    from canister_graph.web import api as api_module
    from canister_graph.web.state import cache
    HAS_WEB = True
except ImportError:
    HAS_WEB = False

pytestmark = pytest.mark.skipif(not HAS_WEB, reason="web dependencies not installed")

FIXTURES = Path(__file__).parent / "fixtures"
SAMPLE = FIXTURES / "sample_project"


@pytest.fixture
def client():
    cache.clear()
    app = create_app()
    yield TestClient(app)
    cache.clear()


def _post_units(client, units, stats=None):
    body = {"units": units}
    if stats is not None:
        body["stats"] = stats
    return client.post("/api/analyze/units", json=body)


# ── Health ────────────────────────────────────────────────────

def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert res.headers["cache-control"] == "no-cache"


# ── Inline Units ──────────────────────────────────────────────

class TestAnalyzeUnits:
    def test_linear(self, client):
        res = _post_units(client, [
            {"name": "A", "kind": "motoko"},
            {"name": "B", "kind": "motoko", "dependsOn": ["A"]},
            {"name": "C", "kind": "rust", "dependsOn": ["A", "B"]},
        ])
        assert res.status_code == 200
        data = res.json()
        assert data["buildOrder"] == ["A", "B", "C"]
        assert data["cycles"] == []
        assert data["errors"] == []
        assert data["report_id"]
        assert data["cached"] is False

    def test_cycle(self, client):
        res = _post_units(client, [
            {"name": "A", "dependsOn": ["B"]},
            {"name": "B", "dependsOn": ["A"]},
        ])
        data = res.json()
        assert data["cycles"] == [["A", "B"]]
        assert data["buildOrder"] == []
        assert data["deployable"] is False

    def test_undefined_dependency(self, client):
        data = _post_units(client, [{"name": "A", "dependsOn": ["Z"]}]).json()
        assert data["edges"] == []
        assert data["buildOrder"] == ["A"]
        assert data["errors"][0]["kind"] == "UndefinedDependency"
        assert data["errors"][0]["missingName"] == "Z"

    def test_stats(self, client):
        data = _post_units(
            client,
            [{"name": "A", "kind": "motoko"}],
            stats={"A": {"linesOfCode": 42, "sourceFiles": ["src/a/main.mo"]}},
        ).json()
        assert data["stats"]["totalLinesOfCode"] == 42

    def test_duplicate_names_rejected(self, client):
        res = _post_units(client, [{"name": "A"}, {"name": "A"}])
        assert res.status_code == 400
        assert "Duplicate" in res.json()["detail"]

    def test_empty_name_rejected(self, client):
        assert _post_units(client, [{"name": ""}]).status_code == 400

    def test_invalid_kind(self, client):
        assert _post_units(client, [{"name": "A", "kind": "python"}]).status_code == 422


# ── Reports & Deps ────────────────────────────────────────────

class TestReports:
    def test_get_report(self, client):
        report_id = _post_units(client, [{"name": "A"}]).json()["report_id"]
        res = client.get(f"/api/reports/{report_id}")
        assert res.status_code == 200
        assert res.json()["cached"] is True
        assert res.json()["buildOrder"] == ["A"]

    def test_report_not_found(self, client):
        assert client.get("/api/reports/nonexistent").status_code == 404

    def test_delete_report(self, client):
        report_id = _post_units(client, [{"name": "A"}]).json()["report_id"]
        assert client.delete(f"/api/reports/{report_id}").status_code == 200
        assert client.get(f"/api/reports/{report_id}").status_code == 404

    def test_deps(self, client):
        report_id = _post_units(client, [
            {"name": "A"},
            {"name": "B", "dependsOn": ["A"]},
            {"name": "C", "dependsOn": ["B"]},
        ]).json()["report_id"]
        res = client.post("/api/deps", json={"report_id": report_id, "unit": "C"})
        assert res.status_code == 200
        data = res.json()
        assert data["direct"] == ["B"]
        assert data["all_transitive"] == ["A", "B"]
        assert data["depth"] == 2

    def test_deps_unknown_unit(self, client):
        report_id = _post_units(client, [{"name": "A"}]).json()["report_id"]
        res = client.post("/api/deps", json={"report_id": report_id, "unit": "nope"})
        assert res.status_code == 404


# ── Project Analysis ──────────────────────────────────────────

class TestAnalyzeProject:
    def test_sample_project(self, client):
        res = client.post("/api/analyze", json={"path": str(SAMPLE)})
        assert res.status_code == 200
        data = res.json()
        assert data["project"] == "sample_project"
        assert data["buildOrder"] == ["audit", "ledger", "backend", "frontend"]

    def test_second_call_cached(self, client):
        first = client.post("/api/analyze", json={"path": str(SAMPLE)}).json()
        second = client.post("/api/analyze", json={"path": str(SAMPLE)}).json()
        assert second["cached"] is True
        assert second["report_id"] == first["report_id"]

    def test_refresh_bypasses_cache(self, client):
        first = client.post("/api/analyze", json={"path": str(SAMPLE)}).json()
        second = client.post("/api/analyze", json={"path": str(SAMPLE), "refresh": True}).json()
        assert second["cached"] is False
        assert second["report_id"] != first["report_id"]

    def test_path_not_found(self, client, tmp_path):
        res = client.post("/api/analyze", json={"path": str(tmp_path / "missing")})
        assert res.status_code == 404

    def test_no_manifest(self, client, tmp_path):
        res = client.post("/api/analyze", json={"path": str(tmp_path)})
        assert res.status_code == 400
        assert "dfx.json" in res.json()["detail"]

    def test_timeout(self, client, monkeypatch):
        def slow(config):
            time.sleep(0.5)

        monkeypatch.setenv("CANISTER_GRAPH_TIMEOUT", "0.05")
        monkeypatch.setattr(api_module, "run_analysis", slow)
        res = client.post("/api/analyze", json={"path": str(SAMPLE), "refresh": True})
        assert res.status_code == 504
