"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_prediction.adapters.supabase_history_repository import (
    SupabaseHistoryRepository,
)
from meal_prediction.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from meal_prediction.config import Settings
from meal_prediction.services.prediction import PredictionService
from meal_prediction.services.user_settings import UserSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_settings_service: UserSettingsService
    prediction_service: PredictionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    history_repository = SupabaseHistoryRepository(
        supabase_client, table_name=resolved_settings.history_table
    )
    user_settings_service = UserSettingsService(
        SupabaseUserSettingsRepository(supabase_client),
        default_timezone=resolved_settings.default_timezone,
    )
    prediction_service = PredictionService(
        repository=history_repository,
        user_settings_service=user_settings_service,
    )

    async def close_resources() -> None:
        prediction_service.close()

    return AppContainer(
        settings=resolved_settings,
        user_settings_service=user_settings_service,
        prediction_service=prediction_service,
        close_resources=close_resources,
    )
