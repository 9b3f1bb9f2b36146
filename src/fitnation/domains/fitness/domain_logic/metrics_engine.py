"""Health metrics engine: profile in, BMI / BMR / TDEE / calories / macros out.

Deterministic and stateless. Every call reads only its argument and the
constant tables below, so it is safe to invoke from any number of tasks.

Rounding convention: round-half-up (``floor(x + 0.5)``) applied to output
fields only. BMR, TDEE and the calorie target are carried at full precision
into the later steps, and the BMI category is decided on the unrounded BMI.
"""

from __future__ import annotations

import math
from functools import lru_cache

from fitnation.domains.fitness.domain_logic.profile_models import (
    ActivityLevel,
    BMICategory,
    DietPreference,
    FitnessGoal,
    Gender,
    HealthMetrics,
    MacroTargets,
    UserProfile,
)
from fitnation.domains.fitness.domain_logic.validation import check_computable

# ---------------------------------------------------------------------------
# Constant tables
# ---------------------------------------------------------------------------

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTRA_ACTIVE: 1.9,
}

# Flat kcal adjustment applied to TDEE. There is intentionally no floor here.
GOAL_CALORIE_ADJUSTMENTS: dict[FitnessGoal, int] = {
    FitnessGoal.SIX_PACK: -500,
    FitnessGoal.FAT_LOSS: -500,
    FitnessGoal.MUSCLE_GAIN: 300,
    FitnessGoal.STRENGTH: 300,
    FitnessGoal.GENERAL_FITNESS: 0,
}

MALE_BMR_OFFSET = 5
FEMALE_BMR_OFFSET = -161

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FATS = 9

# (protein, carbs, fats) fractions of daily calories
DEFAULT_MACRO_RATIO = (0.25, 0.50, 0.25)
LEAN_GOAL_MACRO_RATIO = (0.35, 0.40, 0.25)
LOW_CARB_MACRO_RATIO = (0.35, 0.25, 0.40)
HIGH_PROTEIN_MACRO_RATIO = (0.40, 0.40, 0.20)

BMI_UNDERWEIGHT_BELOW = 18.5
BMI_NORMAL_BELOW = 25.0
BMI_OVERWEIGHT_BELOW = 30.0


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves toward positive infinity, e.g. 2.5 -> 3, 24.95 -> 25.0."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def _round_int(value: float) -> int:
    return int(round_half_up(value))


# ---------------------------------------------------------------------------
# Individual steps
# ---------------------------------------------------------------------------

def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """Unrounded BMI."""
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def classify_bmi(bmi: float) -> BMICategory:
    """Lower bounds are inclusive: 18.5 is Normal, 25 Overweight, 30 Obese."""
    if bmi < BMI_UNDERWEIGHT_BELOW:
        return BMICategory.UNDERWEIGHT
    if bmi < BMI_NORMAL_BELOW:
        return BMICategory.NORMAL
    if bmi < BMI_OVERWEIGHT_BELOW:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


def calculate_bmr(weight_kg: float, height_cm: float, age: int, gender: Gender) -> float:
    """Mifflin-St Jeor basal metabolic rate, kcal/day, unrounded.

    Men:   10 × weight + 6.25 × height − 5 × age + 5
    Women: 10 × weight + 6.25 × height − 5 × age − 161
    """
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == Gender.MALE:
        return base + MALE_BMR_OFFSET
    return base + FEMALE_BMR_OFFSET


def calculate_tdee(bmr: float, activity_level: ActivityLevel) -> float:
    return bmr * ACTIVITY_MULTIPLIERS[activity_level]


def calculate_daily_calories(tdee: float, goal: FitnessGoal) -> float:
    return tdee + GOAL_CALORIE_ADJUSTMENTS[goal]


def select_macro_ratio(
    goal: FitnessGoal, diet_preference: DietPreference
) -> tuple[float, float, float]:
    """Pick the (protein, carbs, fats) split.

    Rules are evaluated in order and each match overrides the previous one,
    so the diet preference always wins over the goal.
    """
    ratio = DEFAULT_MACRO_RATIO
    if goal in (FitnessGoal.SIX_PACK, FitnessGoal.MUSCLE_GAIN):
        ratio = LEAN_GOAL_MACRO_RATIO
    if diet_preference == DietPreference.LOW_CARB:
        ratio = LOW_CARB_MACRO_RATIO
    if diet_preference == DietPreference.HIGH_PROTEIN:
        ratio = HIGH_PROTEIN_MACRO_RATIO
    return ratio


def calculate_macros(
    daily_calories: float, ratio: tuple[float, float, float]
) -> MacroTargets:
    """Convert a calorie target into gram targets, each rounded independently."""
    protein_ratio, carbs_ratio, fats_ratio = ratio
    return MacroTargets(
        protein=_round_int(daily_calories * protein_ratio / KCAL_PER_GRAM_PROTEIN),
        carbs=_round_int(daily_calories * carbs_ratio / KCAL_PER_GRAM_CARBS),
        fats=_round_int(daily_calories * fats_ratio / KCAL_PER_GRAM_FATS),
    )


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def compute_metrics(profile: UserProfile) -> HealthMetrics:
    """Derive HealthMetrics from a profile.

    Any profile with positive, finite biometrics is accepted; zero, negative
    or non-finite values raise ``ProfileValidationError`` instead of
    yielding NaN or infinite values.
    """
    check_computable(profile)

    bmi = calculate_bmi(profile.weight, profile.height)
    bmr = calculate_bmr(profile.weight, profile.height, profile.age, profile.gender)
    tdee = calculate_tdee(bmr, profile.activity_level)
    daily_calories = calculate_daily_calories(tdee, profile.goal)
    ratio = select_macro_ratio(profile.goal, profile.diet_preference)

    return HealthMetrics(
        bmi=round_half_up(bmi, 1),
        bmi_category=classify_bmi(bmi),
        bmr=_round_int(bmr),
        tdee=_round_int(tdee),
        daily_calories=_round_int(daily_calories),
        macros=calculate_macros(daily_calories, ratio),
    )


@lru_cache(maxsize=256)
def cached_compute_metrics(profile: UserProfile) -> HealthMetrics:
    """Memoized :func:`compute_metrics`. Profiles are frozen, so they hash by value."""
    return compute_metrics(profile)


class MetricsEngine:
    """Stateless wrapper around :func:`compute_metrics` for dependency injection."""

    def compute(self, profile: UserProfile) -> HealthMetrics:
        return compute_metrics(profile)
