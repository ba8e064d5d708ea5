"""Prediction session state machine and per-user session ownership."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from meal_prediction.domain.history import HistoricalLogRecord, TodayLog
from meal_prediction.domain.prediction import PredictionPhase, PredictionResult
from meal_prediction.services.habits import FETCH_LIMIT, predict_meal
from meal_prediction.services.user_settings import UserSettingsService

logger = logging.getLogger(__name__)


class HistoryRepository(Protocol):
    """Persistence interface for a user's logged meals."""

    def fetch_recent_logs(
        self, user_id: str, limit: int = FETCH_LIMIT
    ) -> list[HistoricalLogRecord]:
        """Return recent log records, newest first where the store allows."""

    def create_log(self, user_id: str, record: HistoricalLogRecord) -> str:
        """Persist a new log record and return its id."""


@dataclass
class PredictionSession:
    """One fetch-then-compute cycle with an explicit dismiss action.

    A session fetches history at most once. Dismissal is terminal and a
    closed session ignores a fetch that resolves after teardown.
    """

    user_id: str
    repository: HistoryRepository
    now: datetime
    todays_logs: tuple[TodayLog, ...] = ()
    phase: PredictionPhase = PredictionPhase.LOADING
    result: PredictionResult | None = None
    _fetch_started: bool = field(default=False, init=False, repr=False)
    _dismissed: bool = field(default=False, init=False, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    @property
    def closed(self) -> bool:
        """Return True once the session has been torn down."""
        return self._closed

    async def load(self) -> PredictionPhase:
        """Fetch history once and resolve to a result or no result."""
        if self._fetch_started or self._dismissed or self._closed:
            return self.phase
        self._fetch_started = True
        try:
            records = await asyncio.to_thread(
                self.repository.fetch_recent_logs, self.user_id, FETCH_LIMIT
            )
        except Exception:
            logger.exception(
                "Failed to fetch meal history for prediction",
                extra={"user_id": self.user_id},
            )
            records = []

        if self._closed or self._dismissed:
            return self.phase

        self.result = predict_meal(records, self.now, self.todays_logs)
        self.phase = (
            PredictionPhase.HAS_RESULT
            if self.result is not None
            else PredictionPhase.NO_RESULT
        )
        return self.phase

    def dismiss(self) -> None:
        """Hide the suggestion for the rest of this session."""
        self._dismissed = True
        self.phase = PredictionPhase.DISMISSED
        self.result = None

    def close(self) -> None:
        """Tear the session down so a pending fetch changes nothing."""
        self._closed = True


def _wall_clock(tz: ZoneInfo) -> datetime:
    return datetime.now(tz=tz)


@dataclass
class PredictionService:
    """Keeps at most one live prediction session per user.

    Dismissed sessions stay registered so the dismissal holds until the user
    opens a new session. The registry therefore holds one entry per user that
    opened a session since startup; entries leave only through
    ``close_user`` or ``close``.
    """

    repository: HistoryRepository
    user_settings_service: UserSettingsService
    clock: Callable[[ZoneInfo], datetime] = _wall_clock
    _sessions: dict[str, PredictionSession] = field(
        default_factory=dict, init=False, repr=False
    )

    async def open_session(
        self, user_id: str, todays_logs: Iterable[TodayLog] = ()
    ) -> PredictionSession:
        """Replace the user's session with a fresh, loaded one."""
        self.close_user(user_id)
        session = PredictionSession(
            user_id=user_id,
            repository=self.repository,
            now=self._now(user_id),
            todays_logs=tuple(todays_logs),
        )
        self._sessions[user_id] = session
        await session.load()
        return session

    def get_session(self, user_id: str) -> PredictionSession | None:
        """Return the user's live session, if any."""
        return self._sessions.get(user_id)

    def dismiss(self, user_id: str) -> PredictionSession | None:
        """Dismiss the user's live session."""
        session = self._sessions.get(user_id)
        if session is None:
            return None
        session.dismiss()
        return session

    def accept(self, user_id: str) -> tuple[str, HistoricalLogRecord] | None:
        """Log the current suggestion for the user and dismiss it."""
        session = self._sessions.get(user_id)
        if session is None or session.result is None:
            return None
        result = session.result
        now = self._now(user_id)
        record = HistoricalLogRecord(
            food_identity=result.food_name,
            food_id=result.food_id,
            grams=result.grams,
            meal_slot=result.meal_slot,
            calendar_date=now.date().isoformat(),
            macros=result.calculated,
            precise_moment=now,
        )
        log_id = self.repository.create_log(user_id, record)
        session.dismiss()
        logger.info(
            "Logged accepted meal prediction",
            extra={"user_id": user_id, "log_id": log_id},
        )
        return log_id, record

    def close_user(self, user_id: str) -> None:
        """Tear down the user's live session, if any."""
        session = self._sessions.pop(user_id, None)
        if session is not None:
            session.close()

    def close(self) -> None:
        """Tear down every live session."""
        for user_id in list(self._sessions):
            self.close_user(user_id)

    def _now(self, user_id: str) -> datetime:
        timezone_name = self.user_settings_service.get_timezone(user_id)
        return self.clock(ZoneInfo(timezone_name))
