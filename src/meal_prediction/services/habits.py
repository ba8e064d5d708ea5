"""Habit scoring pipeline for meal suggestions.

Every historical record is scored on its own, the scores are summed per
food identity, and the best identity above the selection threshold becomes
the suggestion. All steps are pure and synchronous.
"""

import logging
from collections.abc import Collection, Iterable
from datetime import datetime, timedelta

from meal_prediction.domain.history import (
    HistoricalLogRecord,
    PreciseMoment,
    TodayLog,
)
from meal_prediction.domain.prediction import (
    AggregateEntry,
    PredictionResult,
    ScoredEntry,
)
from meal_prediction.services.meal_slots import meal_slot_at, minutes_of_day

BASE_WEIGHT = 10
RECENCY_WEIGHT = 50
PROXIMITY_WEIGHT = 30
WEEKDAY_WEIGHT = 20
RECENCY_WINDOW = timedelta(hours=24)
PROXIMITY_WINDOW_MINUTES = 60
SELECTION_THRESHOLD = 40
FETCH_LIMIT = 50

logger = logging.getLogger(__name__)


def score_record(record: HistoricalLogRecord, now: datetime) -> ScoredEntry | None:
    """Score one record against the current instant.

    ``now`` must be timezone-aware; its zone is the user's wall clock.
    Returns None for records that carry neither a precise moment nor a
    usable calendar date.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    when = record.when
    if when is None:
        logger.debug(
            "Skipping history record without a date",
            extra={"food_identity": record.food_identity},
        )
        return None

    score = BASE_WEIGHT
    if isinstance(when, PreciseMoment):
        moment = _align_timezone(when.at, now)
        if timedelta(0) <= now - moment <= RECENCY_WINDOW:
            score += RECENCY_WEIGHT
        distance = abs(minutes_of_day(now) - minutes_of_day(moment))
        if distance <= PROXIMITY_WINDOW_MINUTES:
            score += PROXIMITY_WEIGHT
        logged_weekday = moment.weekday()
    else:
        # Date-only records get no credit for yesterday and no proximity bonus.
        if record.calendar_date == now.date().isoformat():
            score += RECENCY_WEIGHT
        logged_weekday = when.day.weekday()

    if logged_weekday == now.weekday():
        score += WEEKDAY_WEIGHT
    return ScoredEntry(identity=record.food_identity, score=score, source=record)


def score_history(
    records: Iterable[HistoricalLogRecord], now: datetime
) -> list[ScoredEntry]:
    """Score every valid record, preserving input order."""
    scored = []
    for record in records:
        entry = score_record(record, now)
        if entry is not None:
            scored.append(entry)
    return scored


def aggregate_scores(entries: Iterable[ScoredEntry]) -> list[AggregateEntry]:
    """Sum scores per identity, keeping the first record seen as representative."""
    totals: dict[str, int] = {}
    representatives: dict[str, HistoricalLogRecord] = {}
    for entry in entries:
        if entry.identity not in representatives:
            representatives[entry.identity] = entry.source
            totals[entry.identity] = 0
        totals[entry.identity] += entry.score
    return [
        AggregateEntry(
            identity=identity,
            total_score=totals[identity],
            representative=representative,
        )
        for identity, representative in representatives.items()
    ]


def select_winner(
    aggregates: Iterable[AggregateEntry],
    exclude: Collection[str] = frozenset(),
) -> AggregateEntry | None:
    """Return the best aggregate at or above the threshold, if any.

    Identities in ``exclude`` are passed over in favour of the next ranked
    candidate. Ties keep input order, which callers must not rely on.
    """
    ranked = sorted(aggregates, key=lambda item: item.total_score, reverse=True)
    for candidate in ranked:
        if candidate.total_score < SELECTION_THRESHOLD:
            return None
        if candidate.identity not in exclude:
            return candidate
    return None


def predict_meal(
    records: Iterable[HistoricalLogRecord],
    now: datetime,
    todays_logs: Iterable[TodayLog] = (),
) -> PredictionResult | None:
    """Run the full pipeline and build the suggestion for ``now``."""
    current_slot = meal_slot_at(now)
    already_logged = {
        log.food_name for log in todays_logs if log.meal_slot == current_slot
    }
    winner = select_winner(
        aggregate_scores(score_history(records, now)), exclude=already_logged
    )
    if winner is None:
        return None
    record = winner.representative
    return PredictionResult(
        food_name=record.food_identity,
        food_id=record.food_id,
        grams=record.grams,
        calculated=record.macros,
        meal_slot=current_slot,
        score=winner.total_score,
    )


def _align_timezone(moment: datetime, now: datetime) -> datetime:
    # Naive moments are taken to be in the wall-clock zone of ``now``.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=now.tzinfo)
    return moment.astimezone(now.tzinfo)
