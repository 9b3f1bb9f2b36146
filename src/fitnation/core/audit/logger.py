"""Audit trail for planner tool calls.

Each row says which tool ran, how long it took, whether it failed and
whether profile data was handed to a content LLM. Tool arguments are
reduced to a SHA-256 digest, so the trail itself holds no profile values.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from fitnation.core.storage.database import FitnessDatabase

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id", "timestamp", "action", "tool_name", "tool_input_hash", "privacy_mode",
    "llm_provider", "llm_disclosed", "duration_ms", "status", "error_type", "metadata_json",
)

_INSERT_SQL = (
    f"INSERT INTO audit_log ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)})"
)


def _hash_input(data: Any) -> str:
    """SHA-256 of canonical JSON, or ``""`` if ``data`` is not serializable."""
    try:
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return ""
    return hashlib.sha256(canonical.encode()).hexdigest()


@dataclass
class AuditEvent:
    """One row of the audit trail."""

    action: str                          # 'tool_invocation' | 'data_delete'
    tool_name: str = ""
    tool_input_hash: str = ""
    privacy_mode: str | None = None
    llm_provider: str | None = None
    llm_disclosed: bool = False
    duration_ms: float | None = None
    status: str = "success"              # 'success' | 'failure'
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_row(self, event_id: str, timestamp: str) -> tuple[Any, ...]:
        metadata_json = (
            json.dumps(self.metadata, separators=(",", ":"), default=str)
            if self.metadata
            else None
        )
        return (
            event_id,
            timestamp,
            self.action,
            self.tool_name or None,
            self.tool_input_hash or None,
            self.privacy_mode,
            self.llm_provider,
            int(self.llm_disclosed),
            self.duration_ms,
            self.status,
            self.error_type,
            metadata_json,
        )


def _where(
    *,
    action: str | None = None,
    tool_name: str | None = None,
    since: str | None = None,
    disclosed_only: bool = False,
) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []
    for column, value in (("action", action), ("tool_name", tool_name)):
        if value:
            clauses.append(f"{column} = ?")
            params.append(value)
    if since:
        clauses.append("timestamp >= ?")
        params.append(since)
    if disclosed_only:
        clauses.append("llm_disclosed = 1")
    return (" WHERE " + " AND ".join(clauses) if clauses else ""), params


class AuditLogger:
    """Writes and queries the ``audit_log`` table.

    Audit writes never break a tool call: a failed insert is logged and
    reported as an empty event id.

    Usage::

        audit = AuditLogger(db)
        audit.log_tool_call(
            "get_diet_plan",
            {"force": False},
            llm_disclosed=True,
            llm_provider="anthropic",
            privacy_mode="strict",
        )
    """

    def __init__(self, database: FitnessDatabase) -> None:
        self._db = database

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def log_event(self, event: AuditEvent) -> str:
        """Insert ``event`` and return its UUID, or ``""`` if the write failed."""
        event_id = str(uuid.uuid4())
        row = event.to_row(event_id, datetime.now(timezone.utc).isoformat())
        try:
            conn = self._db.connection
            conn.execute(_INSERT_SQL, row)
            conn.commit()
        except sqlite3.Error:
            logger.exception("Failed to write audit event for %s", event.tool_name or event.action)
            return ""
        return event_id

    def log_tool_call(
        self,
        tool_name: str,
        tool_input: Any = None,
        *,
        privacy_mode: str | None = None,
        llm_provider: str | None = None,
        llm_disclosed: bool = False,
        duration_ms: float | None = None,
        status: str = "success",
        error_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Record a tool invocation. Only a digest of ``tool_input`` is kept."""
        return self.log_event(AuditEvent(
            action="tool_invocation",
            tool_name=tool_name,
            tool_input_hash=_hash_input(tool_input) if tool_input else "",
            privacy_mode=privacy_mode,
            llm_provider=llm_provider,
            llm_disclosed=llm_disclosed,
            duration_ms=duration_ms,
            status=status,
            error_type=error_type,
            metadata=metadata or {},
        ))

    def log_data_delete(
        self,
        *,
        tool_name: str = "",
        duration_ms: float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        return self.log_event(AuditEvent(
            action="data_delete",
            tool_name=tool_name,
            duration_ms=duration_ms,
            metadata=metadata or {},
        ))

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_events(
        self,
        *,
        action: str | None = None,
        tool_name: str | None = None,
        since: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Matching events, newest first. ``since`` is an ISO 8601 lower bound."""
        where, params = _where(action=action, tool_name=tool_name, since=since)
        rows = self._db.connection.execute(
            f"SELECT * FROM audit_log{where} ORDER BY timestamp DESC LIMIT ?",
            (*params, limit),
        ).fetchall()
        return [dict(row) for row in rows]

    def _count(self, **filters: Any) -> int:
        where, params = _where(**filters)
        return self._db.connection.execute(
            f"SELECT COUNT(*) FROM audit_log{where}", params
        ).fetchone()[0]

    def count_events(self, *, since: str | None = None) -> int:
        return self._count(since=since)

    def count_disclosures(self, *, since: str | None = None) -> int:
        """How many calls sent profile data to a content LLM."""
        return self._count(since=since, disclosed_only=True)
