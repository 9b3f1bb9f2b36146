"""Profile validation and parsing.

The metrics engine only needs ``check_computable``: zero, negative or
non-finite biometrics are rejected there instead of turning into
NaN/Infinity. ``validate_profile`` adds the plausibility ranges applied to
user input.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any, TypeVar

from fitnation.domains.fitness.domain_logic.profile_models import (
    ALLOWED_COUNTRIES,
    DISPLAY_LABELS,
    ActivityLevel,
    DietPreference,
    FitnessGoal,
    Gender,
    UserProfile,
)

AGE_RANGE = (10, 100)
HEIGHT_CM_RANGE = (50.0, 272.0)
WEIGHT_KG_RANGE = (20.0, 350.0)

_E = TypeVar("_E", bound=Enum)


class ProfileValidationError(ValueError):
    """Raised when a profile is malformed, incomplete or out of range."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class UnknownOptionError(LookupError):
    """Raised when a value falls outside one of the closed option sets."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_BIOMETRICS = (
    ("age", AGE_RANGE, "years"),
    ("height", HEIGHT_CM_RANGE, "cm"),
    ("weight", WEIGHT_KG_RANGE, "kg"),
)

_OPTION_FIELDS = (
    ("gender", Gender),
    ("activity_level", ActivityLevel),
    ("goal", FitnessGoal),
    ("diet_preference", DietPreference),
)


def _computable_errors(profile: UserProfile) -> list[str]:
    errors: list[str] = []

    if not isinstance(profile.age, int) or isinstance(profile.age, bool):
        errors.append("age must be a whole number of years")

    for field, _, _ in _BIOMETRICS:
        value = getattr(profile, field)
        if not _is_number(value) or not math.isfinite(value):
            errors.append(f"{field} must be a finite number")
        elif value <= 0:
            errors.append(f"{field} must be greater than 0")

    for field, enum_type in _OPTION_FIELDS:
        if not isinstance(getattr(profile, field), enum_type):
            errors.append(f"{field} must be a {enum_type.__name__}")
    return errors


def check_computable(profile: UserProfile) -> None:
    """Reject only what would make the metrics NaN or infinite.

    Positive, finite age, height and weight and real enum members are
    enough; plausibility ranges are left to :func:`validate_profile`.

    Raises:
        ProfileValidationError: listing each unusable field.
    """
    errors = _computable_errors(profile)
    if errors:
        raise ProfileValidationError(errors)


def validate_profile(profile: UserProfile) -> None:
    """Check every field of ``profile`` and raise once with all problems found.

    On top of :func:`check_computable` this enforces a non-empty name, the
    accepted age/height/weight ranges and the supported countries.

    Raises:
        ProfileValidationError: listing each invalid field.
    """
    errors: list[str] = []

    if not isinstance(profile.name, str) or not profile.name.strip():
        errors.append("name must not be empty")

    errors.extend(_computable_errors(profile))

    for field, (lo, hi), unit in _BIOMETRICS:
        value = getattr(profile, field)
        if _is_number(value) and math.isfinite(value) and value > 0 and not lo <= value <= hi:
            errors.append(f"{field} must be between {lo:g} and {hi:g} {unit}")

    if profile.country not in ALLOWED_COUNTRIES:
        errors.append(f"country {profile.country!r} is not supported")

    if errors:
        raise ProfileValidationError(errors)

# ---------------------------------------------------------------------------
# Parsing loosely typed input (tool arguments, stored JSON)
# ---------------------------------------------------------------------------

def parse_option(enum_type: type[_E], value: Any) -> _E:
    """Resolve ``value`` to a member of ``enum_type``.

    Accepts a member, its identifier (``"very_active"``), its name
    (``"VERY_ACTIVE"``) or its display label (``"Very Active (6-7 days/week)"``),
    case-insensitively.

    Raises:
        UnknownOptionError: if nothing matches. Values are never defaulted.
    """
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        needle = value.strip().lower()
        for member in enum_type:
            candidates = (
                member.value.lower(),
                member.name.lower(),
                DISPLAY_LABELS[member].lower(),
            )
            if needle in candidates:
                return member
    raise UnknownOptionError(f"Unknown {enum_type.__name__}: {value!r}")


def _coerce_number(errors: list[str], field: str, value: Any, *, integer: bool) -> Any:
    if _is_number(value):
        if integer and isinstance(value, float):
            if not value.is_integer():
                errors.append(f"{field} must be a whole number")
                return None
            return int(value)
        return value
    if isinstance(value, str):
        try:
            return int(value) if integer else float(value)
        except ValueError:
            pass
    errors.append(f"{field} must be a number")
    return None


_REQUIRED_FIELDS = (
    "name", "age", "gender", "height", "weight",
    "country", "activity_level", "goal", "diet_preference",
)

# camelCase keys as produced by older clients and the display shape
_FIELD_ALIASES = {
    "activityLevel": "activity_level",
    "dietPreference": "diet_preference",
}


def parse_profile(data: Mapping[str, Any]) -> UserProfile:
    """Build and validate a UserProfile from a plain mapping.

    Raises:
        ProfileValidationError: for missing fields or bad numbers.
        UnknownOptionError: for enum values outside the closed sets.
    """
    normalized = {_FIELD_ALIASES.get(k, k): v for k, v in data.items()}

    missing = [f for f in _REQUIRED_FIELDS if normalized.get(f) in (None, "")]
    if missing:
        raise ProfileValidationError([f"{f} is required" for f in missing])

    errors: list[str] = []
    age = _coerce_number(errors, "age", normalized["age"], integer=True)
    height = _coerce_number(errors, "height", normalized["height"], integer=False)
    weight = _coerce_number(errors, "weight", normalized["weight"], integer=False)
    if errors:
        raise ProfileValidationError(errors)

    profile = UserProfile(
        name=str(normalized["name"]).strip(),
        age=age,
        gender=parse_option(Gender, normalized["gender"]),
        height=float(height),
        weight=float(weight),
        country=str(normalized["country"]).strip(),
        activity_level=parse_option(ActivityLevel, normalized["activity_level"]),
        goal=parse_option(FitnessGoal, normalized["goal"]),
        diet_preference=parse_option(DietPreference, normalized["diet_preference"]),
    )
    validate_profile(profile)
    return profile


def profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    """Serialize a profile to JSON-safe primitives (enum identifiers)."""
    return {
        "name": profile.name,
        "age": profile.age,
        "gender": profile.gender.value,
        "height": profile.height,
        "weight": profile.weight,
        "country": profile.country,
        "activity_level": profile.activity_level.value,
        "goal": profile.goal.value,
        "diet_preference": profile.diet_preference.value,
    }
