"""Tests for user settings."""

from meal_prediction.services.user_settings import (
    UserSettingsService,
    is_valid_timezone,
)
from tests.conftest import InMemoryUserSettingsRepository


def test_get_timezone_defaults_when_unset() -> None:
    service = UserSettingsService(
        InMemoryUserSettingsRepository(), default_timezone="Europe/Madrid"
    )

    assert service.get_timezone("user-1") == "Europe/Madrid"


def test_get_timezone_ignores_unknown_stored_value() -> None:
    repository = InMemoryUserSettingsRepository(timezones={"user-1": "Mars/Base"})
    service = UserSettingsService(repository)

    assert service.get_timezone("user-1") == "UTC"


def test_set_timezone_persists() -> None:
    repository = InMemoryUserSettingsRepository()
    service = UserSettingsService(repository)

    service.set_timezone("user-1", "America/Los_Angeles")

    assert service.get_timezone("user-1") == "America/Los_Angeles"


def test_is_valid_timezone() -> None:
    assert is_valid_timezone("UTC")
    assert is_valid_timezone("Europe/Madrid")
    assert not is_valid_timezone("")
    assert not is_valid_timezone("Mars/Base")
