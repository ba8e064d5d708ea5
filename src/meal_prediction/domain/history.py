"""Domain models for logged meal history."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class MealSlot(StrEnum):
    """Daily eating occasion a log entry belongs to."""

    BREAKFAST = "Breakfast"
    MORNING_SNACK = "MorningSnack"
    LUNCH = "Lunch"
    AFTERNOON_SNACK = "AfternoonSnack"
    DINNER = "Dinner"


# Labels written by the original mobile client.
_SPANISH_LABELS = {
    "Desayuno": MealSlot.BREAKFAST,
    "Almuerzo": MealSlot.MORNING_SNACK,
    "Comida": MealSlot.LUNCH,
    "Merienda": MealSlot.AFTERNOON_SNACK,
    "Cena": MealSlot.DINNER,
}


def parse_meal_slot(value: object) -> MealSlot | None:
    """Parse a stored meal slot label, returning None when unrecognised."""
    if isinstance(value, MealSlot):
        return value
    if not isinstance(value, str):
        return None
    label = value.strip()
    if label in _SPANISH_LABELS:
        return _SPANISH_LABELS[label]
    try:
        return MealSlot(label)
    except ValueError:
        return None


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrients already computed for a logged portion."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float


@dataclass(frozen=True)
class PreciseMoment:
    """A log entry known down to the instant it was created."""

    at: datetime


@dataclass(frozen=True)
class CalendarDay:
    """A log entry known only by the calendar day it was logged on."""

    iso_date: str
    day: date


@dataclass(frozen=True)
class HistoricalLogRecord:
    """A previously logged serving, as read from the store."""

    food_identity: str
    food_id: str
    grams: float
    meal_slot: MealSlot | None
    calendar_date: str | None
    macros: MacroProfile
    precise_moment: datetime | None = None

    @property
    def when(self) -> PreciseMoment | CalendarDay | None:
        """Return the best-known time of the entry, or None if it has none."""
        if self.precise_moment is not None:
            return PreciseMoment(self.precise_moment)
        if not self.calendar_date:
            return None
        try:
            day = date.fromisoformat(self.calendar_date)
        except ValueError:
            return None
        return CalendarDay(iso_date=self.calendar_date, day=day)


@dataclass(frozen=True)
class TodayLog:
    """Food already logged today, used to avoid suggesting it twice."""

    food_name: str
    meal_slot: MealSlot
