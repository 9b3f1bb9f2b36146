"""Privacy policy for what profile data reaches the content LLM.

The LLM needs the numeric targets and enough context to pick foods
(country, goal, diet preference). Identity is not needed:

- strict (default): no name; age coarsened to a decade band
- standard: name and exact age included so the summary can address the user
"""

from __future__ import annotations

from typing import Any, Literal

from fitnation.domains.fitness.domain_logic.profile_models import (
    HealthMetrics,
    UserProfile,
    label_for,
)

PrivacyMode = Literal["strict", "standard"]

PRIVACY_MODES: tuple[str, ...] = ("strict", "standard")


def validate_privacy_mode(value: str | None, default: PrivacyMode = "strict") -> PrivacyMode:
    """Validate and default a privacy_mode argument."""
    if value in (None, ""):
        return default
    if value not in PRIVACY_MODES:
        raise ValueError("privacy_mode must be one of: strict | standard")
    return value  # type: ignore[return-value]


def _age_band(age: int) -> str:
    low = (age // 10) * 10
    return f"{low}-{low + 9}"


def build_llm_profile_context(
    *,
    profile: UserProfile,
    metrics: HealthMetrics,
    privacy_mode: PrivacyMode,
) -> dict[str, Any]:
    """Build the minimized profile/metrics context rendered into prompts."""
    context: dict[str, Any] = {
        "name": None,
        "age": _age_band(profile.age),
        "gender": label_for(profile.gender),
        "weight_kg": profile.weight,
        "height_cm": profile.height,
        "country": profile.country,
        "goal": label_for(profile.goal),
        "activity_level": label_for(profile.activity_level),
        "diet_preference": label_for(profile.diet_preference),
        "metrics": metrics.as_dict(),
    }

    if privacy_mode == "standard":
        context["name"] = profile.name
        context["age"] = str(profile.age)

    return context
