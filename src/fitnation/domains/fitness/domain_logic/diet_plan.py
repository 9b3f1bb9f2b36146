"""Diet plan model, schema validation for generated plans, and the local fallback.

Plans returned by the content service are untrusted: ``parse_diet_plan``
checks every meal and item before anything downstream touches them.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any

from fitnation.domains.fitness.domain_logic.catalog import (
    FOOD_CATEGORIES,
    GLOBAL_REGION,
    Catalog,
    FoodItem,
)
from fitnation.domains.fitness.domain_logic.profile_models import (
    DietPreference,
    HealthMetrics,
    UserProfile,
)

logger = logging.getLogger(__name__)

MEALS = ("breakfast", "lunch", "snacks", "dinner")
ITEM_FIELDS = ("id", "name", "serving", "calories", "protein", "carbs", "fats", "category")
_NUMERIC_FIELDS = ("calories", "protein", "carbs", "fats")
_TEXT_FIELDS = ("id", "name", "serving")


class DietPlanSchemaError(ValueError):
    """Raised when a diet plan payload does not match the expected shape."""


@dataclass
class MealTotals:
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0

    def add(self, item: FoodItem) -> None:
        self.calories += item.calories
        self.protein += item.protein
        self.carbs += item.carbs
        self.fats += item.fats

    def as_dict(self) -> dict[str, float]:
        return {
            "calories": round(self.calories, 1),
            "protein": round(self.protein, 1),
            "carbs": round(self.carbs, 1),
            "fats": round(self.fats, 1),
        }


@dataclass
class DietPlan:
    """A day of meals. ``source`` is 'generated', 'cache' or 'fallback'."""

    breakfast: list[FoodItem] = field(default_factory=list)
    lunch: list[FoodItem] = field(default_factory=list)
    snacks: list[FoodItem] = field(default_factory=list)
    dinner: list[FoodItem] = field(default_factory=list)
    source: str = "generated"

    def meal(self, name: str) -> list[FoodItem]:
        return getattr(self, name)

    def meal_totals(self, name: str) -> MealTotals:
        totals = MealTotals()
        for item in self.meal(name):
            totals.add(item)
        return totals

    def totals(self) -> MealTotals:
        totals = MealTotals()
        for name in MEALS:
            for item in self.meal(name):
                totals.add(item)
        return totals

    def as_payload(self) -> dict[str, list[dict[str, Any]]]:
        """The collaborator wire shape: meals only, no metadata."""
        return {name: [item.as_dict() for item in self.meal(name)] for name in MEALS}

    def as_dict(self) -> dict[str, Any]:
        return {
            **self.as_payload(),
            "meal_totals": {name: self.meal_totals(name).as_dict() for name in MEALS},
            "totals": self.totals().as_dict(),
            "source": self.source,
        }


# ---------------------------------------------------------------------------
# Schema validation
# ---------------------------------------------------------------------------

def _parse_item(meal: str, index: int, raw: Any) -> FoodItem:
    where = f"{meal}[{index}]"
    if not isinstance(raw, dict):
        raise DietPlanSchemaError(f"{where} must be an object")

    missing = [f for f in ITEM_FIELDS if f not in raw]
    if missing:
        raise DietPlanSchemaError(f"{where} is missing fields {missing}")

    for name in _TEXT_FIELDS:
        if not isinstance(raw[name], str) or not raw[name].strip():
            raise DietPlanSchemaError(f"{where}.{name} must be a non-empty string")

    for name in _NUMERIC_FIELDS:
        value = raw[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DietPlanSchemaError(f"{where}.{name} must be a number")
        if not math.isfinite(value):
            raise DietPlanSchemaError(f"{where}.{name} must be a finite number")
        if value < 0:
            raise DietPlanSchemaError(f"{where}.{name} must not be negative")

    category = raw["category"]
    if not isinstance(category, str) or category.strip().lower() not in FOOD_CATEGORIES:
        raise DietPlanSchemaError(f"{where}.category {category!r} is not one of {FOOD_CATEGORIES}")

    return FoodItem(
        id=raw["id"].strip(),
        name=raw["name"].strip(),
        serving=raw["serving"].strip(),
        calories=float(raw["calories"]),
        protein=float(raw["protein"]),
        carbs=float(raw["carbs"]),
        fats=float(raw["fats"]),
        category=category.strip().lower(),
    )


def parse_diet_plan(payload: Any, *, source: str = "generated") -> DietPlan:
    """Validate a collaborator payload (dict or JSON text) into a DietPlan.

    Raises:
        DietPlanSchemaError: on the first structural problem found.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise DietPlanSchemaError(f"Diet plan is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise DietPlanSchemaError("Diet plan must be a JSON object")

    meals: dict[str, list[FoodItem]] = {}
    for meal in MEALS:
        if meal not in payload:
            raise DietPlanSchemaError(f"Diet plan is missing meal {meal!r}")
        items = payload[meal]
        if not isinstance(items, list):
            raise DietPlanSchemaError(f"{meal} must be a list")
        meals[meal] = [_parse_item(meal, i, raw) for i, raw in enumerate(items)]

    return DietPlan(**meals, source=source)


# ---------------------------------------------------------------------------
# Deterministic fallback
# ---------------------------------------------------------------------------

# category picks per meal, first available item wins
_FALLBACK_LAYOUT: dict[str, tuple[str, ...]] = {
    "breakfast": ("carb", "fruit"),
    "lunch": ("carb", "protein", "veg"),
    "snacks": ("fruit",),
    "dinner": ("protein", "veg"),
}


def _pick(pool: list[FoodItem], category: str, used: set[str]) -> FoodItem | None:
    for item in pool:
        if item.category == category and item.id not in used:
            return item
    for item in pool:
        if item.category == category:
            return item
    return None


def build_fallback_diet_plan(
    profile: UserProfile,
    metrics: HealthMetrics,
    catalog: Catalog,
) -> DietPlan:
    """Assemble a plan from the regional food library.

    Picks one item per category slot from the user's region (then the
    global pool), then repeats the lunch and dinner anchor items while the
    day stays under the calorie target.
    """
    region = catalog.region_for_country(profile.country)
    pool = catalog.foods_for_region(region)
    if region != GLOBAL_REGION:
        pool += [f for f in catalog.foods_for_region(GLOBAL_REGION) if f not in pool]
    if profile.diet_preference == DietPreference.VEGETARIAN:
        pool = [f for f in pool if f.vegetarian]

    used: set[str] = set()
    plan = DietPlan(source="fallback")
    for meal, categories in _FALLBACK_LAYOUT.items():
        for category in categories:
            item = _pick(pool, category, used)
            if item is not None:
                plan.meal(meal).append(item)
                used.add(item.id)

    # Top up lunch and dinner with extra servings of their anchor item until the
    # next serving would overshoot the target.
    target = metrics.daily_calories
    anchors = [
        (meal, plan.meal(meal)[0])
        for meal in ("lunch", "dinner")
        if plan.meal(meal) and plan.meal(meal)[0].calories > 0
    ]
    while anchors:
        added = False
        for meal, anchor in anchors:
            if plan.totals().calories + anchor.calories > target:
                continue
            plan.meal(meal).append(anchor)
            added = True
        if not added:
            break

    logger.info(
        "Built fallback diet plan for region %s: %.0f kcal (target %d)",
        region,
        plan.totals().calories,
        target,
    )
    return plan
