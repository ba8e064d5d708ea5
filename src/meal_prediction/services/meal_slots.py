"""Mapping from time of day to meal slot."""

from datetime import datetime

from meal_prediction.domain.history import MealSlot

MINUTES_PER_DAY = 24 * 60

# (start, end) in minutes since midnight, end exclusive.
MEAL_SLOT_BOUNDARIES: tuple[tuple[int, int, MealSlot], ...] = (
    (5 * 60, 11 * 60, MealSlot.BREAKFAST),
    (11 * 60, 13 * 60, MealSlot.MORNING_SNACK),
    (13 * 60, 17 * 60, MealSlot.LUNCH),
    (17 * 60, 19 * 60, MealSlot.AFTERNOON_SNACK),
)


def resolve_meal_slot(minutes_of_day: int) -> MealSlot:
    """Return the meal slot for a number of minutes since midnight.

    Anything outside the daytime boundaries, including the overnight wrap
    from 19:00 to 05:00, is dinner.
    """
    minutes = minutes_of_day % MINUTES_PER_DAY
    for start, end, slot in MEAL_SLOT_BOUNDARIES:
        if start <= minutes < end:
            return slot
    return MealSlot.DINNER


def minutes_of_day(moment: datetime) -> int:
    """Return wall-clock minutes since midnight for a datetime."""
    return moment.hour * 60 + moment.minute


def meal_slot_at(moment: datetime) -> MealSlot:
    """Return the meal slot for a wall-clock datetime."""
    return resolve_meal_slot(minutes_of_day(moment))
