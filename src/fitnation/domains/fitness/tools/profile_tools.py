"""MCP tools for the user profile and its derived health metrics.

Metrics are computed locally and deterministically; none of these tools
send profile data to an LLM.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from fitnation.domains.fitness.domain_logic.metrics_engine import cached_compute_metrics
from fitnation.domains.fitness.domain_logic.profile_models import (
    ALLOWED_COUNTRIES,
    ActivityLevel,
    DietPreference,
    FitnessGoal,
    Gender,
    UserProfile,
    label_for,
)
from fitnation.domains.fitness.domain_logic.validation import (
    AGE_RANGE,
    HEIGHT_CM_RANGE,
    WEIGHT_KG_RANGE,
    ProfileValidationError,
    UnknownOptionError,
    parse_profile,
    profile_to_dict,
)

if TYPE_CHECKING:
    from fitnation.core.audit.logger import AuditLogger
    from fitnation.core.storage.repository import ProfileStore

logger = logging.getLogger(__name__)


def error_response(errors: list[str]) -> str:
    return json.dumps({"status": "error", "errors": errors})


def no_profile_response() -> str:
    return json.dumps({
        "status": "not_found",
        "message": "No profile saved yet. Call save_profile first.",
    })


def parse_profile_args(**fields: Any) -> UserProfile:
    """Build a profile from tool arguments.

    Raises:
        ProfileValidationError: for missing, malformed or out-of-range fields.
        UnknownOptionError: for options outside the closed sets.
    """
    return parse_profile(fields)


def profile_view(profile: UserProfile) -> dict[str, Any]:
    """Stored identifiers plus display labels for each option."""
    return {
        **profile_to_dict(profile),
        "labels": {
            "gender": label_for(profile.gender),
            "activity_level": label_for(profile.activity_level),
            "goal": label_for(profile.goal),
            "diet_preference": label_for(profile.diet_preference),
        },
    }


def _options(enum_type) -> list[dict[str, str]]:
    return [{"value": member.value, "label": label_for(member)} for member in enum_type]


def register_profile_tools(
    mcp: FastMCP,
    store: ProfileStore,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register profile and metrics tools on the MCP server."""

    def _audit(tool_name: str, tool_input: Any, start_time: float, **kwargs: Any) -> None:
        if audit_logger is None:
            return
        audit_logger.log_tool_call(
            tool_name=tool_name,
            tool_input=tool_input,
            duration_ms=(time.monotonic() - start_time) * 1000,
            **kwargs,
        )

    @mcp.tool
    async def list_profile_options(ctx: Context) -> str:
        """List the accepted values for every profile option.

        Options can be passed to other tools by value (e.g. 'very_active')
        or by label (e.g. 'Very Active (6-7 days/week)').
        """
        return json.dumps({
            "status": "ok",
            "gender": _options(Gender),
            "activity_level": _options(ActivityLevel),
            "goal": _options(FitnessGoal),
            "diet_preference": _options(DietPreference),
            "countries": list(ALLOWED_COUNTRIES),
            "ranges": {
                "age_years": list(AGE_RANGE),
                "height_cm": list(HEIGHT_CM_RANGE),
                "weight_kg": list(WEIGHT_KG_RANGE),
            },
        }, indent=2)

    @mcp.tool
    async def calculate_health_metrics(
        ctx: Context,
        age: int,
        gender: str,
        height: float,
        weight: float,
        activity_level: str,
        goal: str,
        diet_preference: str = "standard",
        country: str = "USA",
        name: str = "Guest",
    ) -> str:
        """Calculate BMI, BMR, TDEE, daily calorie target and macros.

        Nothing is stored. Use save_profile to keep the profile.

        Args:
            age: Age in whole years.
            gender: 'male' or 'female'.
            height: Height in centimetres.
            weight: Weight in kilograms.
            activity_level: See list_profile_options.
            goal: See list_profile_options.
            diet_preference: See list_profile_options (default: standard).
            country: Country of residence (default: USA).
            name: Display name (default: Guest).
        """
        start_time = time.monotonic()
        try:
            profile = parse_profile_args(
                name=name, age=age, gender=gender, height=height, weight=weight,
                country=country, activity_level=activity_level, goal=goal,
                diet_preference=diet_preference,
            )
            metrics = cached_compute_metrics(profile)
        except ProfileValidationError as exc:
            _audit("calculate_health_metrics", None, start_time,
                   status="failure", error_type=type(exc).__name__)
            return error_response(exc.errors)
        except UnknownOptionError as exc:
            _audit("calculate_health_metrics", None, start_time,
                   status="failure", error_type=type(exc).__name__)
            return error_response([str(exc)])

        _audit("calculate_health_metrics", profile_to_dict(profile), start_time)
        return json.dumps({"status": "ok", "metrics": metrics.as_dict()}, indent=2)

    @mcp.tool
    async def save_profile(
        ctx: Context,
        name: str,
        age: int,
        gender: str,
        height: float,
        weight: float,
        country: str,
        activity_level: str,
        goal: str,
        diet_preference: str = "standard",
    ) -> str:
        """Save (or replace) the user's profile and return the derived metrics.

        Replacing an existing profile clears the cached diet plan.

        Args:
            name: Display name.
            age: Age in whole years.
            gender: 'male' or 'female'.
            height: Height in centimetres.
            weight: Weight in kilograms.
            country: Country of residence (see list_profile_options).
            activity_level: See list_profile_options.
            goal: See list_profile_options.
            diet_preference: See list_profile_options (default: standard).
        """
        start_time = time.monotonic()
        try:
            profile = parse_profile_args(
                name=name, age=age, gender=gender, height=height, weight=weight,
                country=country, activity_level=activity_level, goal=goal,
                diet_preference=diet_preference,
            )
        except ProfileValidationError as exc:
            _audit("save_profile", None, start_time,
                   status="failure", error_type=type(exc).__name__)
            return error_response(exc.errors)
        except UnknownOptionError as exc:
            _audit("save_profile", None, start_time,
                   status="failure", error_type=type(exc).__name__)
            return error_response([str(exc)])

        updated = store.get_profile() is not None
        if updated:
            store.update_profile(profile)
        else:
            store.save_profile(profile)
        metrics = cached_compute_metrics(profile)

        _audit("save_profile", profile_to_dict(profile), start_time,
               metadata={"updated": updated})
        return json.dumps({
            "status": "updated" if updated else "saved",
            "profile": profile_view(profile),
            "metrics": metrics.as_dict(),
        }, indent=2)

    @mcp.tool
    async def get_profile(ctx: Context) -> str:
        """Return the saved profile and its current metrics."""
        start_time = time.monotonic()
        profile = store.get_profile()
        _audit("get_profile", None, start_time, metadata={"found": profile is not None})
        if profile is None:
            return no_profile_response()
        return json.dumps({
            "status": "ok",
            "profile": profile_view(profile),
            "metrics": cached_compute_metrics(profile).as_dict(),
        }, indent=2)

    @mcp.tool
    async def reset_all_data(ctx: Context, confirm: str = "") -> str:
        """Permanently delete the profile, cached diet plan and workout progress.

        Args:
            confirm: Must be exactly 'DELETE_ALL' to proceed. Safety gate.
        """
        if confirm != "DELETE_ALL":
            return json.dumps({
                "status": "cancelled",
                "message": (
                    "To delete all planner data, call this tool with "
                    "confirm='DELETE_ALL'. This action cannot be undone."
                ),
            })

        start_time = time.monotonic()
        store.reset()
        elapsed_ms = (time.monotonic() - start_time) * 1000

        if audit_logger is not None:
            audit_logger.log_data_delete(
                tool_name="reset_all_data",
                duration_ms=elapsed_ms,
                metadata={"confirmed": True},
            )

        logger.warning("All planner data deleted")
        return json.dumps({
            "status": "all_deleted",
            "duration_ms": round(elapsed_ms, 1),
            "message": "Profile, diet plan and workout progress have been deleted.",
        })
