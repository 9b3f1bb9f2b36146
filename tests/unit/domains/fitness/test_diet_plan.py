"""Tests for diet plan schema validation and the catalog fallback plan."""

from __future__ import annotations

import json

import pytest

from fitnation.domains.fitness.domain_logic.diet_plan import (
    MEALS,
    DietPlanSchemaError,
    build_fallback_diet_plan,
    parse_diet_plan,
)
from fitnation.domains.fitness.domain_logic.metrics_engine import compute_metrics
from fitnation.domains.fitness.domain_logic.profile_models import DietPreference


class TestParseDietPlan:
    def test_valid_payload(self, make_plan_payload):
        plan = parse_diet_plan(make_plan_payload())
        assert [len(plan.meal(m)) for m in MEALS] == [1, 1, 1, 1]
        assert plan.source == "generated"

    def test_accepts_json_text(self, plan_json):
        assert parse_diet_plan(plan_json).lunch[0].name == "Chicken Rice"

    def test_totals(self, make_plan_payload):
        plan = parse_diet_plan(make_plan_payload(calories=250))
        totals = plan.totals().as_dict()
        assert totals == {"calories": 1000.0, "protein": 40.0, "carbs": 120.0, "fats": 20.0}
        assert plan.meal_totals("dinner").calories == 250

    def test_empty_meal_list_allowed(self, make_plan_payload):
        payload = make_plan_payload()
        payload["snacks"] = []
        assert parse_diet_plan(payload).snacks == []

    def test_missing_meal(self, make_plan_payload):
        payload = make_plan_payload()
        del payload["snacks"]
        with pytest.raises(DietPlanSchemaError, match="missing meal 'snacks'"):
            parse_diet_plan(payload)

    def test_missing_field(self, make_plan_payload):
        payload = make_plan_payload()
        del payload["lunch"][0]["fats"]
        with pytest.raises(DietPlanSchemaError, match="missing fields"):
            parse_diet_plan(payload)

    def test_negative_number(self, make_plan_payload):
        payload = make_plan_payload()
        payload["breakfast"][0]["calories"] = -10
        with pytest.raises(DietPlanSchemaError, match="must not be negative"):
            parse_diet_plan(payload)

    @pytest.mark.parametrize("value", ["300", None, True])
    def test_non_numeric(self, make_plan_payload, value):
        payload = make_plan_payload()
        payload["dinner"][0]["protein"] = value
        with pytest.raises(DietPlanSchemaError, match="must be a number"):
            parse_diet_plan(payload)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_number(self, make_plan_payload, value):
        payload = make_plan_payload()
        payload["snacks"][0]["calories"] = value
        with pytest.raises(DietPlanSchemaError, match="must be a finite number"):
            parse_diet_plan(payload)

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_json_literal(self, make_plan_payload, literal):
        # json.loads accepts these literals, so they must be caught afterwards
        text = json.dumps(make_plan_payload()).replace('"calories": 300', f'"calories": {literal}', 1)
        assert literal in text
        with pytest.raises(DietPlanSchemaError, match="breakfast\\[0\\].calories must be a finite number"):
            parse_diet_plan(text)

    def test_bad_category(self, make_plan_payload):
        payload = make_plan_payload()
        payload["snacks"][0]["category"] = "candy"
        with pytest.raises(DietPlanSchemaError, match="category"):
            parse_diet_plan(payload)

    def test_category_normalized(self, make_plan_payload):
        payload = make_plan_payload()
        payload["snacks"][0]["category"] = " Fruit "
        assert parse_diet_plan(payload).snacks[0].category == "fruit"

    def test_invalid_json_text(self):
        with pytest.raises(DietPlanSchemaError, match="not valid JSON"):
            parse_diet_plan("{not json")

    def test_non_object(self):
        with pytest.raises(DietPlanSchemaError, match="JSON object"):
            parse_diet_plan([1, 2, 3])

    def test_as_payload_reparses(self, make_plan_payload):
        plan = parse_diet_plan(make_plan_payload())
        again = parse_diet_plan(json.dumps(plan.as_payload()))
        assert again.as_payload() == plan.as_payload()

    def test_as_dict_includes_totals(self, make_plan_payload):
        data = parse_diet_plan(make_plan_payload()).as_dict()
        assert data["source"] == "generated"
        assert set(data["meal_totals"]) == set(MEALS)
        assert data["totals"]["calories"] == 1200.0


class TestFallbackPlan:
    def test_uses_regional_foods(self, catalog, profile):
        plan = build_fallback_diet_plan(profile, compute_metrics(profile), catalog)
        assert plan.source == "fallback"
        assert plan.breakfast[0].id == "we-oats-1"
        western = {f.id for f in catalog.foods_for_region("WESTERN")}
        assert all(item.id in western for m in MEALS for item in plan.meal(m))

    def test_every_meal_filled(self, catalog, profile):
        plan = build_fallback_diet_plan(profile, compute_metrics(profile), catalog)
        assert all(plan.meal(m) for m in MEALS)

    def test_stays_under_target(self, catalog, profile):
        metrics = compute_metrics(profile)
        plan = build_fallback_diet_plan(profile, metrics, catalog)
        total = plan.totals().calories
        smallest_anchor = min(plan.lunch[0].calories, plan.dinner[0].calories)
        assert total <= metrics.daily_calories
        assert total > metrics.daily_calories - smallest_anchor

    def test_vegetarian_excludes_meat(self, catalog, make_profile):
        profile = make_profile(diet_preference=DietPreference.VEGETARIAN)
        plan = build_fallback_diet_plan(profile, compute_metrics(profile), catalog)
        items = [item for m in MEALS for item in plan.meal(m)]
        assert items
        assert all(item.vegetarian for item in items)
        assert any(item.category == "protein" for item in items)

    @pytest.mark.parametrize("country", ["Bangladesh", "UAE", "Japan"])
    def test_other_regions(self, catalog, make_profile, country):
        profile = make_profile(country=country)
        plan = build_fallback_diet_plan(profile, compute_metrics(profile), catalog)
        region = catalog.region_for_country(country)
        regional = {f.id for f in catalog.foods_for_region(region)}
        assert plan.breakfast[0].id in regional
