"""MCP tools for the daily workout routine and completion tracking."""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from fitnation.domains.fitness.domain_logic.profile_models import FitnessGoal
from fitnation.domains.fitness.domain_logic.validation import UnknownOptionError, parse_option
from fitnation.domains.fitness.domain_logic.workout_progress import (
    reset_workout_progress as reset_progress,
)
from fitnation.domains.fitness.domain_logic.workout_progress import (
    toggle_exercise,
    workout_status,
)
from fitnation.domains.fitness.tools.profile_tools import error_response

if TYPE_CHECKING:
    from fitnation.core.audit.logger import AuditLogger
    from fitnation.core.storage.repository import ProfileStore
    from fitnation.domains.fitness.domain_logic.catalog import Catalog

logger = logging.getLogger(__name__)


def register_workout_tools(
    mcp: FastMCP,
    store: ProfileStore,
    catalog: Catalog,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register workout routine tools on the MCP server."""

    def _resolve_goal(goal: str | None) -> FitnessGoal:
        """Explicit goal, else the saved profile's goal.

        Raises:
            UnknownOptionError: if the goal is unknown or none can be found.
        """
        if goal:
            return parse_option(FitnessGoal, goal)
        profile = store.get_profile()
        if profile is None:
            raise UnknownOptionError("No goal given and no profile saved")
        return profile.goal

    def _audit(tool_name: str, goal: FitnessGoal, start_time: float) -> None:
        if audit_logger is not None:
            audit_logger.log_tool_call(
                tool_name=tool_name,
                tool_input={"goal": goal.value},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )

    @mcp.tool
    async def get_workout_routine(ctx: Context, goal: str | None = None) -> str:
        """Get the daily routine (warmup, main, cooldown) with completion status.

        Args:
            goal: Fitness goal (see list_profile_options). Defaults to the
                saved profile's goal.
        """
        start_time = time.monotonic()
        try:
            resolved = _resolve_goal(goal)
        except UnknownOptionError as exc:
            return error_response([str(exc)])

        status = workout_status(store, catalog, resolved)
        _audit("get_workout_routine", resolved, start_time)
        return json.dumps({"status": "ok", **status}, indent=2)

    @mcp.tool
    async def toggle_exercise_complete(
        ctx: Context,
        exercise_name: str,
        goal: str | None = None,
    ) -> str:
        """Mark an exercise done, or undo it if it is already done.

        Args:
            exercise_name: Exact exercise name from get_workout_routine.
            goal: Fitness goal. Defaults to the saved profile's goal.
        """
        start_time = time.monotonic()
        try:
            resolved = _resolve_goal(goal)
            completed = toggle_exercise(store, catalog, resolved, exercise_name)
        except UnknownOptionError as exc:
            return error_response([str(exc)])

        status = workout_status(store, catalog, resolved)
        _audit("toggle_exercise_complete", resolved, start_time)
        return json.dumps({
            "status": "ok",
            "exercise": exercise_name,
            "completed": completed,
            "progress_percent": status["progress_percent"],
            "completed_count": status["completed"],
            "total": status["total"],
        })

    @mcp.tool
    async def reset_workout_progress(ctx: Context, goal: str | None = None) -> str:
        """Clear all completed exercises for a goal's routine.

        Args:
            goal: Fitness goal. Defaults to the saved profile's goal.
        """
        start_time = time.monotonic()
        try:
            resolved = _resolve_goal(goal)
        except UnknownOptionError as exc:
            return error_response([str(exc)])

        reset_progress(store, resolved)
        _audit("reset_workout_progress", resolved, start_time)
        return json.dumps({
            "status": "reset",
            "goal": resolved.value,
            "progress_percent": 0,
        })
