"""MCP tool for reviewing the audit trail.

The audit log records which tools ran and whether profile data was sent
to a content LLM. It never contains profile values, only hashed inputs.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from fitnation.core.audit.logger import AuditLogger

logger = logging.getLogger(__name__)

_EVENT_FIELDS = (
    "timestamp", "action", "tool_name", "privacy_mode",
    "llm_provider", "status", "error_type", "duration_ms",
)


def register_audit_tools(mcp: FastMCP, audit_logger: AuditLogger) -> None:
    """Register the audit log tool on the MCP server."""

    @mcp.tool
    async def get_audit_log(
        ctx: Context,
        days: int = 30,
        tool_name: str | None = None,
        limit: int = 20,
    ) -> str:
        """Review recent tool usage and how often your profile was sent to an LLM.

        Args:
            days: Look-back window in days (default: 30).
            tool_name: Only show events for this tool.
            limit: Maximum number of events listed (default: 20).
        """
        if days < 1 or limit < 1:
            return json.dumps({
                "status": "error",
                "errors": ["days and limit must be at least 1"],
            })

        since = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        events = audit_logger.get_events(tool_name=tool_name, since=since, limit=limit)
        per_tool = Counter(e["tool_name"] or e["action"] for e in events)

        return json.dumps({
            "status": "ok",
            "period_days": days,
            "total_events": audit_logger.count_events(since=since),
            "llm_disclosures": audit_logger.count_disclosures(since=since),
            "events_by_tool": dict(per_tool),
            "events": [
                {**{k: e.get(k) for k in _EVENT_FIELDS}, "llm_disclosed": bool(e.get("llm_disclosed"))}
                for e in events
            ],
        }, indent=2)
