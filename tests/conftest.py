"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from meal_prediction.config import Settings
from meal_prediction.containers import AppContainer
from meal_prediction.domain.history import HistoricalLogRecord, MacroProfile, MealSlot
from meal_prediction.services.prediction import HistoryRepository, PredictionService
from meal_prediction.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)

# Thursday, 13:30 UTC.
NOW = datetime(2024, 5, 16, 13, 30, tzinfo=UTC)


def make_record(
    food_identity: str = "Tortilla",
    *,
    precise_moment: datetime | None = None,
    calendar_date: str | None = None,
    grams: float = 150.0,
    meal_slot: MealSlot | None = MealSlot.LUNCH,
    food_id: str | None = None,
) -> HistoricalLogRecord:
    """Build a history record, deriving the calendar date from the moment."""
    if calendar_date is None and precise_moment is not None:
        calendar_date = precise_moment.date().isoformat()
    return HistoricalLogRecord(
        food_identity=food_identity,
        food_id=food_id or f"food-{food_identity.lower()}",
        grams=grams,
        meal_slot=meal_slot,
        calendar_date=calendar_date,
        macros=MacroProfile(calories=300.0, protein_g=12.0, fat_g=18.0, carbs_g=20.0),
        precise_moment=precise_moment,
    )


@dataclass
class InMemoryHistoryRepository(HistoryRepository):
    """In-memory meal history for tests."""

    records: dict[str, list[HistoricalLogRecord]] = field(default_factory=dict)
    created: list[tuple[str, HistoricalLogRecord]] = field(default_factory=list)
    fetch_calls: list[tuple[str, int]] = field(default_factory=list)
    error: Exception | None = None

    def fetch_recent_logs(
        self, user_id: str, limit: int = 50
    ) -> list[HistoricalLogRecord]:
        self.fetch_calls.append((user_id, limit))
        if self.error is not None:
            raise self.error
        return list(self.records.get(user_id, []))[:limit]

    def create_log(self, user_id: str, record: HistoricalLogRecord) -> str:
        self.created.append((user_id, record))
        return f"log-{len(self.created)}"


@dataclass
class FailingCreateHistoryRepository(InMemoryHistoryRepository):
    """History repository whose writes always fail."""

    def create_log(self, user_id: str, record: HistoricalLogRecord) -> str:
        raise RuntimeError("Failed to create meal log")


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory user settings repository for tests."""

    timezones: dict[str, str] = field(default_factory=dict)

    def get_timezone(self, user_id: str) -> str | None:
        return self.timezones.get(user_id)

    def set_timezone(self, user_id: str, timezone: str) -> None:
        self.timezones[user_id] = timezone


def fixed_clock(moment: datetime):
    """Return a clock that always reads ``moment`` in the requested zone."""

    def clock(tz: ZoneInfo) -> datetime:
        return moment.astimezone(tz)

    return clock


def recent(minutes: int) -> datetime:
    return NOW - timedelta(minutes=minutes)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
    )


@pytest.fixture
def history_repository() -> InMemoryHistoryRepository:
    return InMemoryHistoryRepository()


@pytest.fixture
def user_settings_service() -> UserSettingsService:
    return UserSettingsService(InMemoryUserSettingsRepository())


@pytest.fixture
def prediction_service(
    history_repository: InMemoryHistoryRepository,
    user_settings_service: UserSettingsService,
) -> PredictionService:
    return PredictionService(
        repository=history_repository,
        user_settings_service=user_settings_service,
        clock=fixed_clock(NOW),
    )


@pytest.fixture
def container(
    settings: Settings,
    user_settings_service: UserSettingsService,
    prediction_service: PredictionService,
) -> AppContainer:
    async def close_resources() -> None:
        prediction_service.close()

    return AppContainer(
        settings=settings,
        user_settings_service=user_settings_service,
        prediction_service=prediction_service,
        close_resources=close_resources,
    )
