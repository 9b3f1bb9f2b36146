"""Tests for profile validation and loose-input parsing."""

from __future__ import annotations

import math

import pytest

from fitnation.domains.fitness.domain_logic.profile_models import (
    ActivityLevel,
    DietPreference,
    FitnessGoal,
    Gender,
    label_for,
)
from fitnation.domains.fitness.domain_logic.validation import (
    ProfileValidationError,
    UnknownOptionError,
    check_computable,
    parse_option,
    parse_profile,
    profile_to_dict,
    validate_profile,
)


def _raw(**overrides):
    data = {
        "name": "Alex",
        "age": 30,
        "gender": "male",
        "height": 180,
        "weight": 80,
        "country": "USA",
        "activity_level": "moderate",
        "goal": "fat_loss",
        "diet_preference": "standard",
    }
    data.update(overrides)
    return data


class TestValidateProfile:
    def test_valid_profile_passes(self, profile):
        validate_profile(profile)

    @pytest.mark.parametrize("height", [0.0, -170.0])
    def test_non_positive_height(self, make_profile, height):
        with pytest.raises(ProfileValidationError, match="height must be greater than 0"):
            validate_profile(make_profile(height=height))

    @pytest.mark.parametrize("weight", [math.nan, math.inf])
    def test_non_finite_weight(self, make_profile, weight):
        with pytest.raises(ProfileValidationError, match="weight must be a finite number"):
            validate_profile(make_profile(weight=weight))

    def test_out_of_range_age(self, make_profile):
        with pytest.raises(ProfileValidationError, match="age"):
            validate_profile(make_profile(age=150))

    def test_unsupported_country(self, make_profile):
        with pytest.raises(ProfileValidationError, match="Atlantis"):
            validate_profile(make_profile(country="Atlantis"))

    def test_empty_name(self, make_profile):
        with pytest.raises(ProfileValidationError, match="name must not be empty"):
            validate_profile(make_profile(name="  "))

    def test_collects_all_errors(self, make_profile):
        with pytest.raises(ProfileValidationError) as exc_info:
            validate_profile(make_profile(height=0.0, weight=-1.0, country="Atlantis"))
        assert len(exc_info.value.errors) == 3
        assert "; " in str(exc_info.value)

    def test_is_value_error(self, make_profile):
        with pytest.raises(ValueError):
            validate_profile(make_profile(height=0.0))


class TestCheckComputable:
    @pytest.mark.parametrize("overrides", [
        {"weight": 360.0},
        {"height": 45.0, "weight": 18.0, "age": 10},
        {"age": 150, "country": "Atlantis", "name": ""},
    ])
    def test_implausible_but_computable_passes(self, make_profile, overrides):
        check_computable(make_profile(**overrides))

    @pytest.mark.parametrize("overrides,field", [
        ({"height": 0.0}, "height"),
        ({"weight": -5.0}, "weight"),
        ({"weight": math.nan}, "weight"),
        ({"height": math.inf}, "height"),
        ({"age": 0}, "age"),
    ])
    def test_unusable_biometrics_rejected(self, make_profile, overrides, field):
        with pytest.raises(ProfileValidationError, match=field):
            check_computable(make_profile(**overrides))

    def test_raw_string_option_rejected(self, make_profile):
        with pytest.raises(ProfileValidationError, match="goal must be a FitnessGoal"):
            check_computable(make_profile(goal="fat_loss"))


class TestParseOption:
    def test_by_value(self):
        assert parse_option(ActivityLevel, "very_active") is ActivityLevel.VERY_ACTIVE

    def test_by_name_case_insensitive(self):
        assert parse_option(FitnessGoal, "SIX_PACK") is FitnessGoal.SIX_PACK
        assert parse_option(FitnessGoal, "six_pack") is FitnessGoal.SIX_PACK

    def test_by_display_label(self):
        assert parse_option(ActivityLevel, "Very Active (6-7 days/week)") is ActivityLevel.VERY_ACTIVE
        assert parse_option(FitnessGoal, "Strength & Power") is FitnessGoal.STRENGTH
        assert parse_option(DietPreference, "high protein") is DietPreference.HIGH_PROTEIN

    def test_member_passthrough(self):
        assert parse_option(Gender, Gender.FEMALE) is Gender.FEMALE

    def test_unknown_raises_lookup_error(self):
        with pytest.raises(UnknownOptionError, match="Unknown FitnessGoal"):
            parse_option(FitnessGoal, "Marathon")
        with pytest.raises(LookupError):
            parse_option(Gender, "other")

    def test_non_string_raises(self):
        with pytest.raises(UnknownOptionError):
            parse_option(Gender, 1)

    def test_every_label_round_trips(self):
        for enum_type in (Gender, ActivityLevel, FitnessGoal, DietPreference):
            for member in enum_type:
                assert parse_option(enum_type, label_for(member)) is member


class TestParseProfile:
    def test_parses_identifiers(self):
        profile = parse_profile(_raw())
        assert profile.gender is Gender.MALE
        assert profile.activity_level is ActivityLevel.MODERATE
        assert profile.height == 180.0
        assert isinstance(profile.height, float)

    def test_accepts_camel_case_keys(self):
        data = _raw()
        data["activityLevel"] = data.pop("activity_level")
        data["dietPreference"] = data.pop("diet_preference")
        profile = parse_profile(data)
        assert profile.diet_preference is DietPreference.STANDARD

    def test_accepts_labels(self):
        profile = parse_profile(_raw(
            activity_level="Sedentary (Office job, little exercise)",
            goal="Six Pack Abs",
        ))
        assert profile.goal is FitnessGoal.SIX_PACK

    def test_numeric_strings_coerced(self):
        profile = parse_profile(_raw(age="42", height="172.5", weight="70"))
        assert profile.age == 42
        assert profile.height == 172.5

    def test_missing_fields_reported(self):
        data = _raw()
        del data["height"]
        del data["goal"]
        with pytest.raises(ProfileValidationError) as exc_info:
            parse_profile(data)
        assert exc_info.value.errors == ["height is required", "goal is required"]

    def test_non_numeric_rejected(self):
        with pytest.raises(ProfileValidationError, match="weight must be a number"):
            parse_profile(_raw(weight="heavy"))

    def test_fractional_age_rejected(self):
        with pytest.raises(ProfileValidationError, match="whole number"):
            parse_profile(_raw(age=30.5))

    def test_unknown_option_rejected(self):
        with pytest.raises(UnknownOptionError):
            parse_profile(_raw(goal="Marathon"))

    def test_range_checked(self):
        with pytest.raises(ProfileValidationError, match="height must be greater than 0"):
            parse_profile(_raw(height=0))

    def test_profile_to_dict_is_parseable(self, profile):
        data = profile_to_dict(profile)
        assert data["activity_level"] == "moderate"
        assert parse_profile(data) == profile
