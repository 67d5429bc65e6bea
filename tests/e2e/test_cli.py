"""End-to-end CLI runs in test mode with file-backed storage."""

import json

import pytest
from typer.testing import CliRunner

from tiermatch.cli.main import app
from tiermatch.core.storage.kv_store import FileKeyValueStore, is_demo_database_loaded

runner = CliRunner()


@pytest.fixture
def kv_dir(tmp_path, monkeypatch):
    path = tmp_path / "kv"
    monkeypatch.setenv("TIERMATCH_TEST_MODE", "1")
    monkeypatch.setenv("TIERMATCH_STORAGE__KV_DIR", str(path))
    monkeypatch.setenv("TIERMATCH_SCAN__AI_RATE_LIMIT_DELAY_MS", "0")
    monkeypatch.setenv("TIERMATCH_SCAN__UI_SMOOTHNESS_DELAY_MS", "0")
    monkeypatch.setenv("TIERMATCH_DEMO__MIN_DELAY_MS", "0")
    monkeypatch.setenv("TIERMATCH_DEMO__RANDOM_DELAY_MS", "0")
    return path


@pytest.fixture
def job_file(tmp_path):
    path = tmp_path / "job.yaml"
    path.write_text(
        "id: job-data-eng\n"
        "title: Data Engineer\n"
        "description: Build data pipelines for analytics and reporting\n"
        "required_skills:\n"
        "  - Python\n"
        "  - SQL\n"
        "  - Airflow\n",
        encoding="utf-8",
    )
    return path


def test_scan_writes_tiered_results(kv_dir, job_file, tmp_path):
    output = tmp_path / "out" / "results.json"

    result = runner.invoke(
        app, ["scan", "--job", str(job_file), "--budget", "5", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert set(data) == {"excellent", "good", "moderate", "low", "poor"}
    assert sum(len(tier) for tier in data.values()) == 20
    methods = [m["method"] for tier in data.values() for m in tier]
    assert methods.count("ai") == 5
    # result was cached for the next run
    assert any(p.name.startswith("match-cache-") for p in kv_dir.iterdir())


def test_import_writes_selected_tiers(kv_dir, job_file, tmp_path):
    output = tmp_path / "imported.json"

    result = runner.invoke(
        app,
        ["import", "--job", str(job_file), "--tiers", "excellent,good", "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    imported = json.loads(output.read_text(encoding="utf-8"))
    assert imported
    for candidate in imported:
        assert candidate["match_scores"]["job-data-eng"] >= 65
        assert "job-data-eng" in candidate["match_rationales"]


def test_import_rejects_unknown_tier(kv_dir, job_file, tmp_path):
    result = runner.invoke(
        app,
        ["import", "--job", str(job_file), "--tiers", "superb", "--output", str(tmp_path / "x.json")],
    )
    assert result.exit_code == 1


def test_scan_rejects_budget_above_max(kv_dir, job_file):
    result = runner.invoke(app, ["scan", "--job", str(job_file), "--budget", "50"])
    assert result.exit_code == 1


def test_scan_rejects_invalid_job_file(kv_dir, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("description: no title here\n", encoding="utf-8")

    result = runner.invoke(app, ["scan", "--job", str(bad)])

    assert result.exit_code == 1


def test_stats(kv_dir):
    result = runner.invoke(app, ["stats"])

    assert result.exit_code == 0, result.output
    assert "Candidates" in result.output
    assert "20" in result.output


def test_demo_flag_commands(kv_dir):
    result = runner.invoke(app, ["load-demo"])
    assert result.exit_code == 0, result.output
    assert is_demo_database_loaded(FileKeyValueStore(kv_dir))

    result = runner.invoke(app, ["reset-demo"])
    assert result.exit_code == 0, result.output
    assert not is_demo_database_loaded(FileKeyValueStore(kv_dir))


def test_clear_cache(kv_dir, job_file):
    assert runner.invoke(app, ["scan", "--job", str(job_file), "--budget", "2"]).exit_code == 0
    assert any(p.name.startswith("match-cache-") for p in kv_dir.iterdir())

    result = runner.invoke(app, ["clear-cache", "--job", str(job_file)])

    assert result.exit_code == 0, result.output
    assert not any(p.name.startswith("match-cache-") for p in kv_dir.iterdir())


def test_job_without_id_gets_stable_id_across_runs(kv_dir, tmp_path):
    job_path = tmp_path / "anonymous.json"
    job_path.write_text(
        json.dumps({"title": "Data Engineer", "required_skills": ["Python", "SQL", "Airflow"]}),
        encoding="utf-8",
    )
    keys = []
    for run in range(2):
        output = tmp_path / f"imported-{run}.json"
        result = runner.invoke(
            app,
            ["import", "--job", str(job_path), "--tiers", "excellent", "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        imported = json.loads(output.read_text(encoding="utf-8"))
        keys.append(set(imported[0]["match_scores"]))

    assert keys[0] == keys[1]
    assert next(iter(keys[0])).startswith("job-")
