"""SQLite run history with WAL mode."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from atelier.config import DEFAULT_DATA_DIR


class Database:
    """
    Stores one row per finished simulation run.

    Products and skills are never persisted, only run statistics.
    """

    def __init__(self, data_dir: Path | None = None) -> None:
        self.data_dir = data_dir or DEFAULT_DATA_DIR
        self.db_path = self.data_dir / "data" / "atelier.db"

    def _ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        (self.data_dir / "data").mkdir(exist_ok=True)

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with WAL mode."""
        self._ensure_dirs()
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def ensure_tables(self) -> None:
        """Create all tables if they don't exist."""
        with self.connect() as conn:
            conn.executescript(_SCHEMA)

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Execute a query and return results."""
        with self.connect() as conn:
            cursor = conn.execute(sql, params)
            return cursor.fetchall()

    def record_run(self, run: dict[str, Any]) -> None:
        """Insert or replace a run summary (SimulationResult.to_dict() shape)."""
        config = run.get("config", {})
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO runs (
                    run_id, status, workers, skills, products, seed,
                    completed, messages, delegations, duration_seconds, details
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(run_id) DO UPDATE SET
                    status = excluded.status,
                    completed = excluded.completed,
                    messages = excluded.messages,
                    delegations = excluded.delegations,
                    duration_seconds = excluded.duration_seconds,
                    details = excluded.details
                """,
                (
                    run["run_id"],
                    run["status"],
                    config.get("workers", 0),
                    config.get("skills", 0),
                    config.get("products", 0),
                    config.get("seed"),
                    run["completed"],
                    run["messages"],
                    run.get("delegations", 0),
                    run.get("duration_seconds", 0.0),
                    json.dumps(run, default=str),
                ),
            )

    def recent_runs(self, limit: int = 20, offset: int = 0) -> list[dict[str, Any]]:
        rows = self.execute(
            """
            SELECT run_id, status, workers, skills, products, seed, completed,
                   messages, delegations, duration_seconds, started_at
            FROM runs ORDER BY id DESC LIMIT ? OFFSET ?
            """,
            (limit, offset),
        )
        return [dict(row) for row in rows]


_SCHEMA = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id TEXT UNIQUE NOT NULL,
    status TEXT NOT NULL,
    workers INTEGER NOT NULL,
    skills INTEGER NOT NULL,
    products INTEGER NOT NULL,
    seed INTEGER,
    completed INTEGER NOT NULL DEFAULT 0,
    messages INTEGER NOT NULL DEFAULT 0,
    delegations INTEGER NOT NULL DEFAULT 0,
    duration_seconds REAL NOT NULL DEFAULT 0.0,
    details TEXT DEFAULT '{}',
    started_at TEXT NOT NULL DEFAULT (datetime('now'))
);

INSERT OR IGNORE INTO schema_version (version) VALUES (1);
"""
