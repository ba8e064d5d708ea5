"""Supabase repository for user settings."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from meal_prediction.services.user_settings import UserSettingsRepository


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for user settings."""

    client: Client

    def get_timezone(self, user_id: str) -> str | None:
        """Return the stored timezone for a user."""
        response = (
            self.client.table("user_settings")
            .select("timezone")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("timezone")

    def set_timezone(self, user_id: str, timezone_name: str) -> None:
        """Store the user's timezone, creating the settings row if needed."""
        self.client.table("user_settings").upsert(
            {
                "user_id": user_id,
                "timezone": timezone_name,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
