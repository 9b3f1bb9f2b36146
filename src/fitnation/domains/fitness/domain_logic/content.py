"""LLM-backed content: the health summary and the daily diet plan.

Both calls go through ``ContentLLMClient``. Numbers in the prompts come
from the metrics engine; the LLM only writes prose or picks foods. Any
provider failure degrades to fixed text or the catalog fallback plan.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fitnation.core.privacy.policy import (
    PrivacyMode,
    build_llm_profile_context,
    validate_privacy_mode,
)
from fitnation.domains.fitness.domain_logic.diet_plan import (
    DietPlan,
    DietPlanSchemaError,
    build_fallback_diet_plan,
    parse_diet_plan,
)
from fitnation.domains.fitness.domain_logic.profile_models import HealthMetrics, UserProfile

if TYPE_CHECKING:
    from fitnation.core.llm.client import ContentLLMClient
    from fitnation.core.storage.repository import ProfileStore
    from fitnation.domains.fitness.domain_logic.catalog import Catalog

logger = logging.getLogger(__name__)

SUMMARY_FALLBACK = (
    "1. Stay consistent with your daily calorie goal.\n"
    "2. Prioritize protein to maintain muscle mass.\n"
    "3. Drink at least 3 liters of water daily."
)

SUMMARY_TASK_INSTRUCTIONS = """\
## Task: Health Summary

Write a brief, encouraging health summary and exactly 3 key tips for success.

Formatting rules:
1. Use a numbered list for the tips (1. ..., 2. ..., 3. ...).
2. Do not use asterisks, markdown bolding or bullets.
3. Output plain text only.
4. Keep it under 120 words.
5. Address the user by name if a name is provided."""

DIET_PLAN_TASK_INSTRUCTIONS = """\
## Task: Daily Diet Plan

Build one day of meals for the user.

1. Use only foods that are locally available, culturally common and affordable \
in the user's country. Prefer traditional staples over imported goods.
2. The items combined should roughly meet the calorie and macro targets.
3. Respect the diet preference (no meat or fish for Vegetarian).

Respond with a single JSON object and nothing else:
{"breakfast": [ITEM, ...], "lunch": [ITEM, ...], "snacks": [ITEM, ...], "dinner": [ITEM, ...]}
where ITEM is
{"id": str, "name": str, "serving": str, "calories": number, "protein": number, \
"carbs": number, "fats": number, "category": "protein"|"carb"|"veg"|"fruit"|"dairy"|"fat"}"""


# ---------------------------------------------------------------------------
# Prompt rendering
# ---------------------------------------------------------------------------

def _profile_lines(context: dict[str, Any]) -> list[str]:
    lines = ["User Profile:"]
    if context.get("name"):
        lines.append(f"- Name: {context['name']}")
    lines.extend([
        f"- Age: {context['age']}",
        f"- Gender: {context['gender']}",
        f"- Weight: {context['weight_kg']:g}kg",
        f"- Height: {context['height_cm']:g}cm",
        f"- Goal: {context['goal']}",
        f"- Activity: {context['activity_level']}",
        f"- Diet Preference: {context['diet_preference']}",
        f"- Location: {context['country']}",
    ])
    return lines


def build_summary_prompt(context: dict[str, Any]) -> str:
    """Render the summary request from a privacy-filtered context."""
    m = context["metrics"]
    macros = m["macros"]
    lines = _profile_lines(context)
    lines.extend([
        "",
        "Metrics:",
        f"- BMI: {m['bmi']} ({m['bmiCategory']})",
        f"- TDEE: {m['tdee']} kcal",
        f"- Daily Calories: {m['dailyCalories']} kcal",
        f"- Macro Goals: P:{macros['protein']}g, C:{macros['carbs']}g, F:{macros['fats']}g",
    ])
    return "\n".join(lines)


def build_diet_plan_prompt(context: dict[str, Any]) -> str:
    """Render the diet plan request from a privacy-filtered context."""
    m = context["metrics"]
    macros = m["macros"]
    lines = _profile_lines(context)
    lines.extend([
        "",
        f"Target Daily Calories: {m['dailyCalories']} kcal",
        f"Target Macros: Protein {macros['protein']}g, Carbs {macros['carbs']}g, "
        f"Fats {macros['fats']}g",
    ])
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

async def health_summary(
    client: ContentLLMClient,
    profile: UserProfile,
    metrics: HealthMetrics,
    privacy_mode: PrivacyMode = "strict",
) -> str:
    """Return a short plain-text summary with 3 numbered tips.

    Never raises for provider problems; returns ``SUMMARY_FALLBACK`` instead.
    """
    context = build_llm_profile_context(
        profile=profile, metrics=metrics, privacy_mode=privacy_mode
    )
    try:
        response = await client.generate_text(
            task="health_summary",
            task_instructions=SUMMARY_TASK_INSTRUCTIONS,
            user_message=build_summary_prompt(context),
        )
    except Exception:
        logger.exception("Health summary generation failed, using fallback tips")
        return SUMMARY_FALLBACK

    content = response.content.strip()
    if not content:
        logger.warning("Health summary generation returned no text, using fallback tips")
        return SUMMARY_FALLBACK
    return content


async def generate_diet_plan(
    client: ContentLLMClient,
    profile: UserProfile,
    metrics: HealthMetrics,
    privacy_mode: PrivacyMode = "strict",
) -> DietPlan | None:
    """Ask the LLM for a diet plan and validate it.

    Returns ``None`` when the provider fails or the payload is malformed.
    """
    context = build_llm_profile_context(
        profile=profile, metrics=metrics, privacy_mode=privacy_mode
    )
    try:
        payload = await client.generate_json(
            task="diet_plan",
            task_instructions=DIET_PLAN_TASK_INSTRUCTIONS,
            user_message=build_diet_plan_prompt(context),
        )
    except Exception:
        logger.exception("Diet plan generation failed")
        return None

    try:
        return parse_diet_plan(payload)
    except DietPlanSchemaError as exc:
        logger.warning("Generated diet plan rejected: %s", exc)
        return None


def diet_cache_key(profile: UserProfile) -> str:
    return f"diet:{profile.country}:{profile.goal.value}:{profile.diet_preference.value}"


class DietPlanService:
    """Cached diet plan generation with a catalog fallback.

    A cached plan is reused while country, goal and diet preference are
    unchanged. Fallback plans are returned but never cached, so the next
    request tries the LLM again.
    """

    def __init__(
        self,
        client: ContentLLMClient,
        store: ProfileStore,
        catalog: Catalog,
        default_privacy_mode: PrivacyMode = "strict",
    ) -> None:
        self._client = client
        self._store = store
        self._catalog = catalog
        self._default_privacy_mode = default_privacy_mode

    async def get_plan(
        self,
        profile: UserProfile,
        metrics: HealthMetrics,
        force: bool = False,
        privacy_mode: str | None = None,
    ) -> tuple[DietPlan, bool]:
        """Return the plan and whether the content LLM was asked for it.

        The flag is False only for cache hits; a fallback plan still
        follows a request to the LLM.
        """
        mode = validate_privacy_mode(privacy_mode, self._default_privacy_mode)
        key = diet_cache_key(profile)

        if not force:
            cached = self._store.get_cached_diet_plan(key)
            if cached is not None:
                try:
                    return parse_diet_plan(cached, source="cache"), False
                except DietPlanSchemaError as exc:
                    logger.warning("Discarding unreadable cached diet plan: %s", exc)
                    self._store.clear_cached_diet_plan()

        plan = await generate_diet_plan(self._client, profile, metrics, mode)
        if plan is None:
            return build_fallback_diet_plan(profile, metrics, self._catalog), True

        self._store.save_cached_diet_plan(key, plan.as_payload())
        logger.info("Cached generated diet plan under %s", key)
        return plan, True
