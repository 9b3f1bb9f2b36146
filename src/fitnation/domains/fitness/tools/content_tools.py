"""MCP tools for LLM-written content: the health summary and the diet plan.

These are the only tools that send profile data off the device. What is
sent is limited by ``privacy_mode`` and every call is audit-logged with
whether a disclosure happened.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from fitnation.core.privacy.policy import PrivacyMode, validate_privacy_mode
from fitnation.domains.fitness.domain_logic.content import health_summary
from fitnation.domains.fitness.domain_logic.metrics_engine import cached_compute_metrics
from fitnation.domains.fitness.tools.profile_tools import error_response, no_profile_response

if TYPE_CHECKING:
    from fitnation.core.audit.logger import AuditLogger
    from fitnation.core.llm.client import ContentLLMClient
    from fitnation.core.storage.repository import ProfileStore
    from fitnation.domains.fitness.domain_logic.content import DietPlanService

logger = logging.getLogger(__name__)


def register_content_tools(
    mcp: FastMCP,
    llm_client: ContentLLMClient,
    store: ProfileStore,
    diet_service: DietPlanService,
    audit_logger: AuditLogger | None = None,
    default_privacy_mode: PrivacyMode = "strict",
) -> None:
    """Register summary and diet plan tools on the MCP server."""

    def _disclosed() -> bool:
        return llm_client.provider_name != "mock"

    @mcp.tool
    async def get_health_summary(ctx: Context, privacy_mode: str | None = None) -> str:
        """Get a short, encouraging summary of the saved profile with 3 tips.

        Args:
            privacy_mode: Controls what reaches the LLM prompt.
                'strict' (default) - no name, age as a decade band.
                'standard' - name and exact age included.
        """
        try:
            mode = validate_privacy_mode(privacy_mode, default_privacy_mode)
        except ValueError as exc:
            return error_response([str(exc)])

        profile = store.get_profile()
        if profile is None:
            return no_profile_response()

        start_time = time.monotonic()
        metrics = cached_compute_metrics(profile)
        summary = await health_summary(llm_client, profile, metrics, mode)

        if audit_logger is not None:
            audit_logger.log_tool_call(
                tool_name="get_health_summary",
                tool_input={"privacy_mode": mode},
                privacy_mode=mode,
                llm_provider=llm_client.provider_name,
                llm_disclosed=_disclosed(),
                duration_ms=(time.monotonic() - start_time) * 1000,
            )

        return json.dumps({
            "status": "ok",
            "summary": summary,
            "metrics": metrics.as_dict(),
        }, indent=2)

    @mcp.tool
    async def get_diet_plan(
        ctx: Context,
        force: bool = False,
        privacy_mode: str | None = None,
    ) -> str:
        """Get a one-day diet plan with local, affordable foods.

        The plan is cached per country, goal and diet preference. If the LLM
        is unavailable a plan is assembled from the built-in food library.

        Args:
            force: Regenerate even if a cached plan exists.
            privacy_mode: 'strict' (default) or 'standard'; see get_health_summary.
        """
        try:
            mode = validate_privacy_mode(privacy_mode, default_privacy_mode)
        except ValueError as exc:
            return error_response([str(exc)])

        profile = store.get_profile()
        if profile is None:
            return no_profile_response()

        start_time = time.monotonic()
        metrics = cached_compute_metrics(profile)
        try:
            plan, llm_requested = await diet_service.get_plan(
                profile, metrics, force=force, privacy_mode=mode,
            )
        except Exception as exc:
            if audit_logger is not None:
                audit_logger.log_tool_call(
                    tool_name="get_diet_plan",
                    tool_input={"force": force, "privacy_mode": mode},
                    privacy_mode=mode,
                    llm_provider=llm_client.provider_name,
                    duration_ms=(time.monotonic() - start_time) * 1000,
                    status="failure",
                    error_type=type(exc).__name__,
                )
            raise

        if audit_logger is not None:
            audit_logger.log_tool_call(
                tool_name="get_diet_plan",
                tool_input={"force": force, "privacy_mode": mode},
                privacy_mode=mode,
                llm_provider=llm_client.provider_name,
                llm_disclosed=llm_requested and _disclosed(),
                duration_ms=(time.monotonic() - start_time) * 1000,
                metadata={"source": plan.source},
            )

        return json.dumps({
            "status": "ok",
            "source": plan.source,
            "targets": {
                "dailyCalories": metrics.daily_calories,
                "macros": metrics.macros.as_dict(),
            },
            "plan": plan.as_dict(),
        }, indent=2)
