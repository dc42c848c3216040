"""Meal plans offered on hotel rates and their traveler-facing labels."""

from enum import Enum


class MealPlan(str, Enum):
    NO_MEAL = "nomeal"
    BREAKFAST = "breakfast"
    HALF_BOARD = "half-board"
    FULL_BOARD = "full-board"
    ALL_INCLUSIVE = "all-inclusive"


MEAL_PLAN_LABELS: dict[MealPlan, str] = {
    MealPlan.NO_MEAL: "No meals included",
    MealPlan.BREAKFAST: "Breakfast included",
    MealPlan.HALF_BOARD: "Breakfast & dinner included",
    MealPlan.FULL_BOARD: "All meals included",
    MealPlan.ALL_INCLUSIVE: "All-inclusive",
}

# Spellings some suppliers use for the same plans
_ALIASES: dict[str, MealPlan] = {
    "all_inclusive": MealPlan.ALL_INCLUSIVE,
    "half_board": MealPlan.HALF_BOARD,
    "full_board": MealPlan.FULL_BOARD,
    "no_meal": MealPlan.NO_MEAL,
    "": MealPlan.NO_MEAL,
}


def parse_meal_plan(meal: str | None) -> MealPlan | None:
    """Map a raw meal string to a MealPlan, or None when it is not a known plan."""
    key = (meal or "").strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return MealPlan(key)
    except ValueError:
        return None


def meal_plan_label(meal: str | None) -> str:
    """Display label for a meal string; unknown plans show their raw text."""
    plan = parse_meal_plan(meal)
    if plan is None:
        return meal or ""
    return MEAL_PLAN_LABELS[plan]
