"""CLI tests via typer's CliRunner."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from flowpath_cli.main import app
from flowpath_core import __version__
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def batch_file(tmp_path, raw_batch) -> Path:
    path = tmp_path / "batch.json"
    path.write_text(json.dumps(raw_batch))
    return path


class TestAnalyzeCommand:
    def test_table_output(self, batch_file):
        result = runner.invoke(app, ["analyze", str(batch_file)])

        assert result.exit_code == 0, result.output
        assert "Optimal Path" in result.output
        assert "OPTIMAL" in result.output
        assert "1/2 trace(s) optimal" in result.output

    def test_json_output(self, batch_file):
        result = runner.invoke(app, ["analyze", str(batch_file), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["optimal"]["path"] == ["START", "X", "Y", "END"]
        assert data["optimal"]["distance"] == pytest.approx(6.0)
        assert [c["is_optimal"] for c in data["comparisons"]] == [True, False]

    def test_tolerance_override(self, batch_file):
        result = runner.invoke(
            app, ["analyze", str(batch_file), "--json", "--tolerance", "10"]
        )
        assert json.loads(result.stdout)["optimal_count"] == 2

    def test_penalty_override(self, tmp_path, make_trace):
        traces = [
            make_trace("cheap-fail", [("A", 1, {"q": None}), ("B", 2)], end=3),
            make_trace("steady", [("C", 1), ("B", 3)], end=4),
        ]
        path = tmp_path / "penalty.json"
        path.write_text(json.dumps([t.to_dict() for t in traces]))

        result = runner.invoke(app, ["analyze", str(path), "--json", "--penalty", "1"])
        assert json.loads(result.stdout)["optimal"]["path"] == ["START", "A", "B", "END"]

    def test_yaml_batch(self, tmp_path, raw_batch):
        path = tmp_path / "batch.yaml"
        path.write_text(yaml.safe_dump(raw_batch))

        result = runner.invoke(app, ["analyze", str(path), "--json"])
        assert result.exit_code == 0, result.output

    def test_project_config_applies(self, tmp_path, batch_file):
        (tmp_path / "flowpath.toml").write_text("[analysis]\noptimal_tolerance = 10.0\n")

        result = runner.invoke(app, ["analyze", str(batch_file), "--json"])
        assert json.loads(result.stdout)["optimal_count"] == 2

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "absent.json")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_invalid_batch(self, tmp_path):
        path = tmp_path / "batch.json"
        path.write_text("[]")

        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1
        assert "Invalid trace batch" in result.output

    def test_no_path(self, tmp_path, make_trace):
        path = tmp_path / "idle.json"
        path.write_text(json.dumps([make_trace("idle", [], end=2).to_dict()]))

        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1
        assert "No valid path found" in result.output

    def test_invalid_penalty(self, batch_file):
        result = runner.invoke(app, ["analyze", str(batch_file), "--penalty", "0.5"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestSearchCommand:
    def test_search(self):
        result = runner.invoke(app, ["search", "process", "refund"])

        assert result.exit_code == 0, result.output
        assert 'Searching: "process refund"' in result.output
        assert "process refund" in result.output
        assert "100.0%" in result.output

    def test_limit(self):
        result = runner.invoke(app, ["search", "order", "--limit", "1"])
        assert "1 result(s)" in result.output

    def test_no_matches(self):
        result = runner.invoke(app, ["search", "quantum"])

        assert result.exit_code == 0
        assert "No matching actions" in result.output

    def test_custom_catalog(self, tmp_path):
        catalog = tmp_path / "actions.txt"
        catalog.write_text("reboot device\nfactory reset\n")
        (tmp_path / "flowpath.toml").write_text(f'[search]\ncatalog_path = "{catalog}"\n')

        result = runner.invoke(app, ["search", "reboot"])
        assert "reboot device" in result.output
        assert "process refund" not in result.output

    def test_missing_catalog(self, tmp_path):
        missing = tmp_path / "absent.txt"
        (tmp_path / "flowpath.toml").write_text(f'[search]\ncatalog_path = "{missing}"\n')

        result = runner.invoke(app, ["search", "reboot"])
        assert result.exit_code == 1

    def test_zero_limit_rejected(self):
        result = runner.invoke(app, ["search", "refund", "--limit", "0"])

        assert result.exit_code == 1
        assert "Search failed" in result.output

    def test_invalid_limit(self):
        result = runner.invoke(app, ["search", "refund", "--limit=-1"])

        assert result.exit_code == 1
        assert "Search failed" in result.output


class TestConfigCommand:
    def test_shows_defaults(self):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0, result.output
        assert "analysis.failure_penalty" in result.output

    def test_files_without_config(self):
        result = runner.invoke(app, ["config", "files"])

        assert result.exit_code == 0
        assert "No config files found" in result.output

    def test_files_with_project_config(self, tmp_path):
        (tmp_path / "flowpath.toml").write_text('[project]\nname = "demo"\n')

        result = runner.invoke(app, ["config", "files"])
        assert "Project" in result.output
        assert "demo" in result.output


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
