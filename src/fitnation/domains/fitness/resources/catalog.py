"""MCP Resources exposing the built-in food library and workout routines."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import FastMCP

from fitnation.domains.fitness.domain_logic.catalog import GLOBAL_REGION
from fitnation.domains.fitness.domain_logic.profile_models import ALLOWED_COUNTRIES, label_for

if TYPE_CHECKING:
    from fitnation.domains.fitness.domain_logic.catalog import Catalog


def register_catalog_resources(mcp: FastMCP, catalog: Catalog) -> None:
    """Register catalog discovery resources on the MCP server."""

    @mcp.resource("catalog://foods")
    def food_library_resource() -> str:
        """Regional food library used for fallback diet plans."""
        return json.dumps(
            {
                "food_count": len(catalog.foods),
                "foods": [
                    {**food.as_dict(), "regions": list(food.regions), "vegetarian": food.vegetarian}
                    for food in catalog.foods
                ],
            },
            indent=2,
        )

    @mcp.resource("catalog://workouts")
    def workout_routines_resource() -> str:
        """Daily workout routine for each fitness goal."""
        return json.dumps(
            {
                goal.value: {
                    "label": label_for(goal),
                    "total_exercises": routine.total_exercises,
                    **routine.as_dict(),
                }
                for goal, routine in catalog.routines.items()
            },
            indent=2,
        )

    @mcp.resource("catalog://countries")
    def countries_resource() -> str:
        """Supported countries and the food region each maps to."""
        return json.dumps(
            {
                "countries": [
                    {"country": c, "region": catalog.region_for_country(c)}
                    for c in ALLOWED_COUNTRIES
                ],
                "default_region": GLOBAL_REGION,
            },
            indent=2,
        )
