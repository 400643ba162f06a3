"""BMR and calorie recommendations derived from a user profile"""

import math
from typing import Any

from smartmeal_api.domain import ActivityLevel, Gender, Goal, OnboardingStep
from smartmeal_api.errors import InvalidProfile

# Revised Harris-Benedict coefficients: (base, weight, height, age)
MALE_COEFFICIENTS = (88.362, 13.397, 4.799, 5.677)
FEMALE_COEFFICIENTS = (447.593, 9.247, 3.098, 4.330)

ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

GOAL_MULTIPLIERS = {
    Goal.LOSE_WEIGHT: 0.8,
    Goal.GAIN_WEIGHT: 1.1,
    Goal.GAIN_MUSCLE: 1.1,
}

ONBOARDING_STEPS = (
    "Personal Information",
    "Your Goals",
    "Diet Preferences",
    "Restrictions & Allergies",
    "Food Preferences",
    "Calorie Settings",
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


def _positive(profile: Any, field: str) -> float:
    value = getattr(profile, field, None)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise InvalidProfile(f"{field} must be a positive number, got {value!r}")
    return float(value)


def _activity_multiplier(profile: Any) -> float:
    level = getattr(profile, "activity_level", None)
    try:
        return ACTIVITY_MULTIPLIERS[ActivityLevel(level)]
    except ValueError:
        raise InvalidProfile(f"Unknown activity level: {level!r}") from None


def calculate_bmr(profile: Any) -> int:
    """
    Calculate the activity-adjusted Basal Metabolic Rate of a profile.

    Uses the revised Harris-Benedict equation. Male profiles use the male
    coefficients; female and other profiles use the female coefficients.

    Args:
        profile: Object exposing age, gender, weight (kg), height (cm) and activity_level

    Returns:
        The daily energy estimate in kcal, rounded to the nearest integer

    Raises:
        InvalidProfile: If age, weight or height is not positive or the activity level is unknown
    """
    age = _positive(profile, "age")
    weight = _positive(profile, "weight")
    height = _positive(profile, "height")
    multiplier = _activity_multiplier(profile)

    gender = getattr(profile, "gender", None)
    if gender is None:
        raise InvalidProfile("gender is required")

    if gender == Gender.MALE:
        base, per_kg, per_cm, per_year = MALE_COEFFICIENTS
    else:
        base, per_kg, per_cm, per_year = FEMALE_COEFFICIENTS

    bmr = base + per_kg * weight + per_cm * height - per_year * age
    return round_half_up(bmr * multiplier)


def get_recommended_calories(profile: Any) -> int:
    """
    Calculate the goal-adjusted daily calorie recommendation.

    Losing weight applies a 20% deficit, gaining weight or muscle a 10%
    surplus. Maintenance and unrecognized goals return the BMR unchanged.
    """
    bmr = calculate_bmr(profile)

    try:
        goal = Goal(getattr(profile, "goal", None))
    except ValueError:
        return bmr

    multiplier = GOAL_MULTIPLIERS.get(goal)
    if multiplier is None:
        return bmr
    return round_half_up(bmr * multiplier)


def get_onboarding_steps(completed: bool = False) -> list[OnboardingStep]:
    """List the onboarding steps, all marked with the given completion state."""
    return [OnboardingStep(step=i, title=title, completed=completed) for i, title in enumerate(ONBOARDING_STEPS, 1)]
