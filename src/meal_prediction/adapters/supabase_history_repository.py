"""Supabase repository for logged meal history."""

import logging
from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from meal_prediction.domain.history import (
    HistoricalLogRecord,
    MacroProfile,
    parse_meal_slot,
)
from meal_prediction.services.habits import FETCH_LIMIT
from meal_prediction.services.prediction import HistoryRepository

logger = logging.getLogger(__name__)

_COLUMNS = "id, food_id, food_name, meal, grams, date, created_at, calculated"


@dataclass
class SupabaseHistoryRepository(HistoryRepository):
    """Supabase implementation for daily meal logs."""

    client: Client
    table_name: str = "daily_logs"

    def fetch_recent_logs(
        self, user_id: str, limit: int = FETCH_LIMIT
    ) -> list[HistoricalLogRecord]:
        """Return the user's most recent log records."""
        response = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def create_log(self, user_id: str, record: HistoricalLogRecord) -> str:
        """Insert a log row and return its id."""
        response = (
            self.client.table(self.table_name)
            .insert(
                {
                    "user_id": user_id,
                    "date": record.calendar_date,
                    "food_id": record.food_id,
                    "food_name": record.food_identity,
                    "meal": record.meal_slot.value if record.meal_slot else None,
                    "grams": record.grams,
                    "calculated": {
                        "calories": record.macros.calories,
                        "protein": record.macros.protein_g,
                        "carbs": record.macros.carbs_g,
                        "fat": record.macros.fat_g,
                    },
                    "created_at": record.precise_moment.isoformat()
                    if record.precise_moment
                    else None,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal log")
        return str(response.data[0]["id"])


def _parse_row(row: dict[str, object]) -> HistoricalLogRecord:
    calculated = row.get("calculated")
    if not isinstance(calculated, dict):
        calculated = {}
    return HistoricalLogRecord(
        food_identity=str(row.get("food_name") or ""),
        food_id=str(row.get("food_id") or ""),
        grams=_to_float(row.get("grams")),
        meal_slot=parse_meal_slot(row.get("meal")),
        calendar_date=_parse_date(row.get("date")),
        macros=MacroProfile(
            calories=_to_float(calculated.get("calories")),
            protein_g=_to_float(calculated.get("protein")),
            fat_g=_to_float(calculated.get("fat")),
            carbs_g=_to_float(calculated.get("carbs")),
        ),
        precise_moment=_parse_timestamp(row.get("created_at"), row.get("id")),
    )


def _parse_date(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _parse_timestamp(value: object, row_id: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning(
            "Ignoring unparseable log timestamp",
            extra={"log_id": row_id, "created_at": value},
        )
        return None


def _to_float(value: object) -> float:
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
