"""Profile and metrics models plus the closed option sets they draw from."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Closed option sets
# ---------------------------------------------------------------------------

class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    VERY_ACTIVE = "very_active"
    EXTRA_ACTIVE = "extra_active"


class FitnessGoal(str, Enum):
    SIX_PACK = "six_pack"
    FAT_LOSS = "fat_loss"
    MUSCLE_GAIN = "muscle_gain"
    STRENGTH = "strength"
    GENERAL_FITNESS = "general_fitness"


class DietPreference(str, Enum):
    STANDARD = "standard"
    VEGETARIAN = "vegetarian"
    HIGH_PROTEIN = "high_protein"
    LOW_CARB = "low_carb"


class BMICategory(str, Enum):
    UNDERWEIGHT = "underweight"
    NORMAL = "normal"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


# ---------------------------------------------------------------------------
# Display labels (presentation only; identity lives in the enum values)
# ---------------------------------------------------------------------------

DISPLAY_LABELS: dict[Enum, str] = {
    Gender.MALE: "Male",
    Gender.FEMALE: "Female",
    ActivityLevel.SEDENTARY: "Sedentary (Office job, little exercise)",
    ActivityLevel.LIGHT: "Lightly Active (1-3 days/week)",
    ActivityLevel.MODERATE: "Moderately Active (3-5 days/week)",
    ActivityLevel.VERY_ACTIVE: "Very Active (6-7 days/week)",
    ActivityLevel.EXTRA_ACTIVE: "Extra Active (Physical job + 2x training)",
    FitnessGoal.SIX_PACK: "Six Pack Abs",
    FitnessGoal.FAT_LOSS: "Fat Loss",
    FitnessGoal.MUSCLE_GAIN: "Muscle Gain",
    FitnessGoal.STRENGTH: "Strength & Power",
    FitnessGoal.GENERAL_FITNESS: "General Fitness",
    DietPreference.STANDARD: "Standard",
    DietPreference.VEGETARIAN: "Vegetarian",
    DietPreference.HIGH_PROTEIN: "High Protein",
    DietPreference.LOW_CARB: "Low Carb",
    BMICategory.UNDERWEIGHT: "Underweight",
    BMICategory.NORMAL: "Normal",
    BMICategory.OVERWEIGHT: "Overweight",
    BMICategory.OBESE: "Obese",
}


def label_for(option: Enum) -> str:
    """Return the human-readable label for an option."""
    return DISPLAY_LABELS[option]


ALLOWED_COUNTRIES = [
    "Bangladesh", "India", "Pakistan", "USA", "Canada", "UAE", "China",
    "Sri Lanka", "UK", "Australia", "Germany", "Japan", "Saudi Arabia",
    "Singapore", "France", "Italy", "Brazil",
]


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserProfile:
    """A user's biometric profile. Height in cm, weight in kg."""

    name: str
    age: int
    gender: Gender
    height: float
    weight: float
    country: str
    activity_level: ActivityLevel
    goal: FitnessGoal
    diet_preference: DietPreference


@dataclass(frozen=True)
class MacroTargets:
    """Daily macronutrient targets in grams."""

    protein: int
    carbs: int
    fats: int

    def as_dict(self) -> dict[str, int]:
        return {"protein": self.protein, "carbs": self.carbs, "fats": self.fats}


@dataclass(frozen=True)
class HealthMetrics:
    """Metrics derived from a UserProfile. Never mutated, only superseded."""

    bmi: float
    bmi_category: BMICategory
    bmr: int
    tdee: int
    daily_calories: int
    macros: MacroTargets

    def as_dict(self) -> dict[str, Any]:
        """Render the display shape consumed by dashboards and prompts."""
        return {
            "bmi": self.bmi,
            "bmiCategory": label_for(self.bmi_category),
            "bmr": self.bmr,
            "tdee": self.tdee,
            "dailyCalories": self.daily_calories,
            "macros": self.macros.as_dict(),
        }
