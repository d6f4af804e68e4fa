"""SQLite-backed persistence of batch results and their combined fitness series."""

from __future__ import annotations

import hashlib
import json
import platform
import sqlite3
import time
from pathlib import Path
from typing import Any

from configs.loader import ExperimentConfig
from core.batch_runner import BatchResult


class BatchLogger:
    """Persist batch metadata and per-generation combined fitness in SQLite."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.connection = sqlite3.connect(self.db_path)
        self.connection.row_factory = sqlite3.Row
        self._ensure_schema()

    def close(self) -> None:
        self.connection.close()

    def _ensure_schema(self) -> None:
        self.connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS batch_metadata (
                batch_id TEXT PRIMARY KEY,
                label TEXT NOT NULL,
                config_hash TEXT NOT NULL,
                seed INTEGER NOT NULL,
                config_json TEXT NOT NULL,
                verdict TEXT NOT NULL,
                trials INTEGER NOT NULL,
                failed_trials INTEGER NOT NULL,
                average_generations REAL,
                elapsed_seconds REAL NOT NULL,
                runtime_metadata TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS batch_series (
                batch_id TEXT NOT NULL,
                generation_index INTEGER NOT NULL,
                mean_best_fitness REAL NOT NULL,
                PRIMARY KEY (batch_id, generation_index),
                FOREIGN KEY (batch_id)
                    REFERENCES batch_metadata (batch_id)
                    ON DELETE CASCADE
            );
            """
        )
        self.connection.commit()

    def log_batch(self, config: ExperimentConfig, result: BatchResult) -> str:
        """Store ``result`` for ``config`` and return the new batch id."""
        config_json = json.dumps(config.to_dict(), sort_keys=True, default=str)
        config_hash = hashlib.sha256(config_json.encode("utf-8")).hexdigest()
        runtime_metadata = json.dumps(
            {"python_version": platform.python_version(), "platform": platform.platform()},
            sort_keys=True,
        )
        batch_id = hashlib.sha256(f"{config_hash}:{config.seed}:{time.time_ns()}".encode("utf-8")).hexdigest()[:16]

        self.connection.execute(
            """
            INSERT INTO batch_metadata (
                batch_id, label, config_hash, seed, config_json, verdict,
                trials, failed_trials, average_generations, elapsed_seconds, runtime_metadata
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                batch_id,
                result.label,
                config_hash,
                int(config.seed),
                config_json,
                result.verdict,
                len(result.trials),
                len(result.failures),
                result.average_generations,
                float(result.elapsed),
                runtime_metadata,
            ),
        )
        if result.combined_series is not None:
            self.connection.executemany(
                """
                INSERT INTO batch_series (batch_id, generation_index, mean_best_fitness)
                VALUES (?, ?, ?)
                """,
                [(batch_id, index, float(value)) for index, value in enumerate(result.combined_series)],
            )
        self.connection.commit()
        return batch_id

    def fetch_series(self, batch_id: str) -> list[float]:
        """Return the ordered combined series of a batch (empty when it failed)."""
        rows = self.connection.execute(
            """
            SELECT mean_best_fitness
            FROM batch_series
            WHERE batch_id = ?
            ORDER BY generation_index ASC
            """,
            (batch_id,),
        ).fetchall()
        return [float(row["mean_best_fitness"]) for row in rows]

    def fetch_batch(self, batch_id: str) -> dict[str, Any] | None:
        """Return the metadata row of a batch, if any."""
        row = self.connection.execute(
            """
            SELECT batch_id, label, seed, verdict, trials, failed_trials, average_generations, elapsed_seconds
            FROM batch_metadata
            WHERE batch_id = ?
            """,
            (batch_id,),
        ).fetchone()
        return dict(row) if row is not None else None

    def latest_batch_id(self) -> str | None:
        """Return most recently logged batch id, if any."""
        row = self.connection.execute(
            """
            SELECT batch_id
            FROM batch_metadata
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
            """
        ).fetchone()
        return str(row[0]) if row is not None else None
