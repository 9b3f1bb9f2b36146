"""SQLite connection and schema migrations for the planner store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

_SCHEMA_V1 = """
-- Single active profile (slot = 1)
CREATE TABLE IF NOT EXISTS profiles (
    slot         INTEGER PRIMARY KEY CHECK (slot = 1),
    payload_enc  TEXT NOT NULL,
    updated_at   TEXT NOT NULL
);

-- Most recent generated diet plan, keyed by country/goal/preference
CREATE TABLE IF NOT EXISTS diet_plan_cache (
    slot         INTEGER PRIMARY KEY CHECK (slot = 1),
    cache_key    TEXT NOT NULL,
    plan_enc     TEXT NOT NULL,
    created_at   TEXT NOT NULL
);

-- Completed exercise names per goal
CREATE TABLE IF NOT EXISTS workout_progress (
    goal          TEXT PRIMARY KEY,
    completed_enc TEXT NOT NULL,
    updated_at    TEXT NOT NULL
);
"""

# V2: audit log (tool calls and LLM disclosure tracking)
_SCHEMA_V2 = """
CREATE TABLE IF NOT EXISTS audit_log (
    id              TEXT PRIMARY KEY,
    timestamp       TEXT NOT NULL DEFAULT (datetime('now')),
    action          TEXT NOT NULL,
    tool_name       TEXT,
    tool_input_hash TEXT,
    privacy_mode    TEXT,
    llm_provider    TEXT,
    llm_disclosed   INTEGER DEFAULT 0,
    duration_ms     REAL,
    status          TEXT NOT NULL DEFAULT 'success',
    error_type      TEXT,
    metadata_json   TEXT
);

CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log(timestamp);
CREATE INDEX IF NOT EXISTS idx_audit_tool      ON audit_log(tool_name);
"""


# Applied in order; a fresh database runs all of them.
_MIGRATIONS: tuple[tuple[int, str, str], ...] = (
    (1, "profile, diet plan cache and workout progress tables", _SCHEMA_V1),
    (2, "audit_log table", _SCHEMA_V2),
)


class DatabaseError(Exception):
    """Raised when the planner database cannot be opened or used."""


def _resolve_target(db_path: str) -> str:
    if db_path == ":memory:":
        return db_path
    db_file = Path(db_path).expanduser()
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return str(db_file)


class FitnessDatabase:
    """Owns the SQLite connection shared by the profile store and audit log.

    ``db_path`` may be a file path (``~`` is expanded, parent directories
    are created) or ``":memory:"``.

    Usage::

        with FitnessDatabase("~/.fitnation/planner.db") as db:
            db.connection.execute("SELECT 1")
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection.

        Raises:
            DatabaseError: before ``initialize()`` or after ``close()``.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Open the connection and migrate to ``SCHEMA_VERSION``. Idempotent."""
        if self._conn is not None:
            return
        try:
            conn = sqlite3.connect(_resolve_target(self._db_path))
        except sqlite3.Error as exc:
            raise DatabaseError(f"Could not open database {self._db_path}: {exc}") from exc

        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        self._conn = conn
        self._migrate()
        logger.info("Planner database ready: %s (schema v%d)", self._db_path, SCHEMA_VERSION)

    def _migrate(self) -> None:
        conn = self.connection
        conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_version ("
            "version INTEGER NOT NULL, applied_at TEXT NOT NULL DEFAULT (datetime('now')))"
        )
        current = self.get_schema_version()
        pending = [m for m in _MIGRATIONS if m[0] > current]
        for version, description, ddl in pending:
            conn.executescript(ddl)
            logger.info("Applied schema migration V%d: %s", version, description)
        if pending:
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
            conn.commit()

    def get_schema_version(self) -> int:
        version = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
        return version or 0

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    def __enter__(self) -> FitnessDatabase:
        self.initialize()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
