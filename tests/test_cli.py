from __future__ import annotations

import json
from pathlib import Path

import pytest

from cli.main import run_cli


def _tiny_config(tmp_path: Path, **overrides: object) -> Path:
    payload = {
        "name": "tiny",
        "strand_size": 8,
        "population_size": 16,
        "generation_limit": 2000,
        "batch_size": 2,
        "mutation_rate": 0.1,
        "fitness": "count_ts",
        "seed": 5,
    }
    payload.update(overrides)
    path = tmp_path / "tiny.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_run_command_prints_final_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _tiny_config(tmp_path)

    exit_code = run_cli(["run", "--config", str(config_path), "--seed", "1"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "generation:" in out
    assert "best fitness: 8" in out
    assert "phenome: TTTTTTTT" in out
    assert "stop reason:" in out


def test_batch_then_show(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _tiny_config(tmp_path)
    db_path = tmp_path / "results.db"

    assert run_cli(["batch", "--config", str(config_path), "--db", str(db_path), "--workers", "2"]) == 0
    batch_line = capsys.readouterr().out.strip()
    assert "tiny: converged" in batch_line

    assert run_cli(["show", "--db", str(db_path)]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0].startswith(batch_line.split()[0])
    assert "converged (2 trials)" in lines[0]
    assert lines[-1].endswith(",8")


def test_batch_reports_failure_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _tiny_config(tmp_path, generation_limit=1, mutation_rate=0.0, strand_size=40)

    exit_code = run_cli(["batch", "--config", str(config_path), "--db", str(tmp_path / "results.db")])

    assert exit_code == 1
    assert "tiny: failed" in capsys.readouterr().out


def test_show_without_batches_fails(tmp_path: Path) -> None:
    assert run_cli(["show", "--db", str(tmp_path / "empty.db")]) == 1
