"""Static food and workout catalog, loaded from YAML data files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from fitnation.domains.fitness.domain_logic.profile_models import FitnessGoal
from fitnation.domains.fitness.domain_logic.validation import UnknownOptionError

logger = logging.getLogger(__name__)

# YAML data lives under src/fitnation/domains/fitness/catalog/
DEFAULT_CATALOG_DIR = Path(__file__).resolve().parent.parent / "catalog"

FOOD_CATEGORIES = ("protein", "carb", "veg", "fruit", "dairy", "fat")
REGIONS = ("SOUTH_ASIA", "WESTERN", "MIDDLE_EAST", "EAST_ASIA", "GLOBAL")
GLOBAL_REGION = "GLOBAL"
ROUTINE_SECTIONS = ("warmup", "main", "cooldown")


class CatalogError(Exception):
    """Raised when a catalog file is missing or malformed."""


@dataclass(frozen=True)
class FoodItem:
    """One serving of a food, macros in grams."""

    id: str
    name: str
    serving: str
    calories: float
    protein: float
    carbs: float
    fats: float
    category: str
    regions: tuple[str, ...] = ()
    vegetarian: bool = True

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "serving": self.serving,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
            "category": self.category,
        }


@dataclass(frozen=True)
class WorkoutExercise:
    name: str
    sets: int
    reps: str
    rest: str
    description: str | None = None

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "sets": self.sets,
            "reps": self.reps,
            "rest": self.rest,
        }
        if self.description:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class WorkoutRoutine:
    """Daily routine for one goal, split into warmup / main / cooldown."""

    goal: FitnessGoal
    warmup: tuple[WorkoutExercise, ...]
    main: tuple[WorkoutExercise, ...]
    cooldown: tuple[WorkoutExercise, ...]

    def exercises(self) -> list[WorkoutExercise]:
        return [*self.warmup, *self.main, *self.cooldown]

    @property
    def total_exercises(self) -> int:
        return len(self.warmup) + len(self.main) + len(self.cooldown)

    def exercise_names(self) -> set[str]:
        return {e.name for e in self.exercises()}

    def as_dict(self) -> dict[str, Any]:
        return {
            section: [e.as_dict() for e in getattr(self, section)]
            for section in ROUTINE_SECTIONS
        }


@dataclass
class Catalog:
    """In-memory view of the food library and workout routines."""

    foods: list[FoodItem] = field(default_factory=list)
    routines: dict[FitnessGoal, WorkoutRoutine] = field(default_factory=dict)
    country_regions: dict[str, str] = field(default_factory=dict)

    def region_for_country(self, country: str) -> str:
        """Map a country to its food region, ``GLOBAL`` when unmapped."""
        return self.country_regions.get(country, GLOBAL_REGION)

    def foods_for_region(self, region: str) -> list[FoodItem]:
        return [f for f in self.foods if region in f.regions]

    def routine_for(self, goal: FitnessGoal) -> WorkoutRoutine:
        try:
            return self.routines[goal]
        except KeyError as exc:
            raise UnknownOptionError(f"No workout routine for goal {goal!r}") from exc


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise CatalogError(f"Catalog file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise CatalogError(f"{path.name}: expected a mapping at the top level")
    return data


def _parse_food(path: Path, index: int, raw: Any) -> FoodItem:
    if not isinstance(raw, dict):
        raise CatalogError(f"{path.name}: food #{index} is not a mapping")
    try:
        item = FoodItem(
            id=str(raw["id"]),
            name=str(raw["name"]),
            serving=str(raw["serving"]),
            calories=float(raw["calories"]),
            protein=float(raw["protein"]),
            carbs=float(raw["carbs"]),
            fats=float(raw["fats"]),
            category=str(raw["category"]),
            regions=tuple(raw.get("regions", [GLOBAL_REGION])),
            vegetarian=bool(raw.get("vegetarian", True)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CatalogError(f"{path.name}: food #{index} is invalid: {exc}") from exc

    if item.category not in FOOD_CATEGORIES:
        raise CatalogError(f"{path.name}: food {item.id!r} has unknown category {item.category!r}")
    unknown_regions = [r for r in item.regions if r not in REGIONS]
    if unknown_regions:
        raise CatalogError(f"{path.name}: food {item.id!r} has unknown regions {unknown_regions}")
    return item


def _parse_exercise(path: Path, where: str, raw: Any) -> WorkoutExercise:
    try:
        return WorkoutExercise(
            name=str(raw["name"]),
            sets=int(raw["sets"]),
            reps=str(raw["reps"]),
            rest=str(raw["rest"]),
            description=raw.get("description"),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise CatalogError(f"{path.name}: exercise in {where} is invalid: {exc}") from exc


def load_foods(path: Path) -> tuple[list[FoodItem], dict[str, str]]:
    """Parse the food library file into items and the country -> region map."""
    data = _read_yaml(path)
    foods = [_parse_food(path, i, raw) for i, raw in enumerate(data.get("foods", []))]

    ids = [f.id for f in foods]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise CatalogError(f"{path.name}: duplicate food ids {duplicates}")

    country_regions = {str(k): str(v) for k, v in (data.get("country_regions") or {}).items()}
    return foods, country_regions


def load_routines(path: Path) -> dict[FitnessGoal, WorkoutRoutine]:
    """Parse the workout file into one routine per goal."""
    data = _read_yaml(path)
    routines: dict[FitnessGoal, WorkoutRoutine] = {}

    for key, sections in (data.get("routines") or {}).items():
        try:
            goal = FitnessGoal(key)
        except ValueError as exc:
            raise CatalogError(f"{path.name}: unknown goal {key!r}") from exc
        sections = sections or {}
        parsed = {
            section: tuple(
                _parse_exercise(path, f"{key}.{section}", raw)
                for raw in sections.get(section, [])
            )
            for section in ROUTINE_SECTIONS
        }
        routines[goal] = WorkoutRoutine(goal=goal, **parsed)

    missing = [g.value for g in FitnessGoal if g not in routines]
    if missing:
        raise CatalogError(f"{path.name}: missing routines for {missing}")
    return routines


def load_catalog(directory: str | Path | None = None) -> Catalog:
    """Load ``foods.yaml`` and ``workouts.yaml`` from ``directory``.

    Defaults to the data shipped with the package.
    """
    directory = Path(directory) if directory else DEFAULT_CATALOG_DIR
    foods, country_regions = load_foods(directory / "foods.yaml")
    routines = load_routines(directory / "workouts.yaml")
    logger.info(
        "Loaded catalog from %s: %d foods, %d routines", directory, len(foods), len(routines)
    )
    return Catalog(foods=foods, routines=routines, country_regions=country_regions)
