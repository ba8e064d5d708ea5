"""Domain models for habit-based meal predictions."""

from dataclasses import dataclass
from enum import StrEnum

from meal_prediction.domain.history import HistoricalLogRecord, MacroProfile, MealSlot


class PredictionPhase(StrEnum):
    """Lifecycle phase of a prediction session."""

    LOADING = "loading"
    HAS_RESULT = "has_result"
    NO_RESULT = "no_result"
    DISMISSED = "dismissed"


@dataclass(frozen=True)
class ScoredEntry:
    """Habit score of a single historical record."""

    identity: str
    score: int
    source: HistoricalLogRecord


@dataclass(frozen=True)
class AggregateEntry:
    """Summed habit score for one food identity."""

    identity: str
    total_score: int
    representative: HistoricalLogRecord


@dataclass(frozen=True)
class PredictionResult:
    """Food suggested for one-tap logging."""

    food_name: str
    food_id: str
    grams: float
    calculated: MacroProfile
    meal_slot: MealSlot
    score: int
