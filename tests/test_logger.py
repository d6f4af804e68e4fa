from __future__ import annotations

from pathlib import Path

from configs.loader import ExperimentConfig
from core.batch_runner import BatchResult, TrialOutcome, TrialStatus
from data.logger import BatchLogger


def _result(label: str, series: tuple[float, ...] | None) -> BatchResult:
    status = TrialStatus.CONVERGED if series is not None else TrialStatus.NOT_CONVERGED
    return BatchResult(
        label=label,
        trials=(TrialOutcome(trial_number=1, status=status, series=(1.0, 2.0)),),
        combined_series=series,
        average_generations=2.0 if series is not None else None,
        elapsed=0.5,
    )


def test_logger_round_trip(tmp_path: Path) -> None:
    logger = BatchLogger(tmp_path / "nested" / "batches.db")
    config = ExperimentConfig(name="ok", seed=7)

    batch_id = logger.log_batch(config, _result("ok", (1.0, 2.0, 4.0)))

    assert logger.fetch_series(batch_id) == [1.0, 2.0, 4.0]
    batch = logger.fetch_batch(batch_id)
    assert batch is not None
    assert batch["label"] == "ok"
    assert batch["seed"] == 7
    assert batch["verdict"] == "converged"
    assert batch["failed_trials"] == 0
    assert batch["average_generations"] == 2.0
    logger.close()


def test_failed_batch_has_no_series(tmp_path: Path) -> None:
    logger = BatchLogger(tmp_path / "batches.db")

    batch_id = logger.log_batch(ExperimentConfig(name="bad"), _result("bad", None))

    assert logger.fetch_series(batch_id) == []
    batch = logger.fetch_batch(batch_id)
    assert batch is not None
    assert batch["verdict"] == "failed"
    assert batch["failed_trials"] == 1
    assert batch["average_generations"] is None
    logger.close()


def test_latest_batch_id(tmp_path: Path) -> None:
    logger = BatchLogger(tmp_path / "batches.db")
    assert logger.latest_batch_id() is None
    assert logger.fetch_batch("missing") is None

    logger.log_batch(ExperimentConfig(name="first"), _result("first", (1.0,)))
    second = logger.log_batch(ExperimentConfig(name="second"), _result("second", (2.0,)))

    assert logger.latest_batch_id() == second
    logger.close()
