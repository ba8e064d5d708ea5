"""User settings service."""

import logging
from dataclasses import dataclass
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


class UserSettingsRepository(Protocol):
    """Persistence interface for user settings."""

    def get_timezone(self, user_id: str) -> str | None:
        """Return the user's timezone if set."""

    def set_timezone(self, user_id: str, timezone: str) -> None:
        """Update the user's timezone."""


def is_valid_timezone(value: str) -> bool:
    """Return True when value names a known IANA timezone."""
    if not value:
        return False
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


@dataclass
class UserSettingsService:
    """Service for user settings."""

    repository: UserSettingsRepository
    default_timezone: str = "UTC"

    def get_timezone(self, user_id: str) -> str:
        """Return the user timezone, or the default when unset or unknown."""
        stored = self.repository.get_timezone(user_id)
        if stored is None:
            return self.default_timezone
        if not is_valid_timezone(stored):
            logger.warning(
                "Ignoring unknown stored timezone",
                extra={"user_id": user_id, "timezone": stored},
            )
            return self.default_timezone
        return stored

    def set_timezone(self, user_id: str, timezone: str) -> None:
        """Persist a user's timezone."""
        self.repository.set_timezone(user_id, timezone)
