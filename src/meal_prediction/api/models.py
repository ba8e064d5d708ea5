"""Pydantic models for the prediction API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from meal_prediction.domain.history import (
    HistoricalLogRecord,
    MacroProfile,
    MealSlot,
    TodayLog,
    parse_meal_slot,
)
from meal_prediction.domain.prediction import PredictionPhase, PredictionResult
from meal_prediction.services.prediction import PredictionSession


class MacrosPayload(BaseModel):
    """Macronutrients of a portion."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float

    @classmethod
    def from_profile(cls, macros: MacroProfile) -> "MacrosPayload":
        return cls(
            calories=macros.calories,
            protein_g=macros.protein_g,
            fat_g=macros.fat_g,
            carbs_g=macros.carbs_g,
        )


class PredictionPayload(BaseModel):
    """Suggested food."""

    food_name: str
    food_id: str
    grams: float
    calculated: MacrosPayload
    meal_slot: MealSlot
    score: int

    @classmethod
    def from_result(cls, result: PredictionResult) -> "PredictionPayload":
        return cls(
            food_name=result.food_name,
            food_id=result.food_id,
            grams=result.grams,
            calculated=MacrosPayload.from_profile(result.calculated),
            meal_slot=result.meal_slot,
            score=result.score,
        )


class SessionPayload(BaseModel):
    """Current state of a user's prediction session."""

    user_id: str
    phase: PredictionPhase
    result: PredictionPayload | None = None

    @classmethod
    def from_session(cls, session: PredictionSession) -> "SessionPayload":
        return cls(
            user_id=session.user_id,
            phase=session.phase,
            result=PredictionPayload.from_result(session.result)
            if session.result
            else None,
        )


class TodayLogPayload(BaseModel):
    """Food already logged today."""

    food_name: str
    meal_slot: MealSlot

    @field_validator("meal_slot", mode="before")
    @classmethod
    def _parse_slot(cls, value: object) -> MealSlot:
        slot = parse_meal_slot(value)
        if slot is None:
            raise ValueError(f"unknown meal slot: {value!r}")
        return slot

    def to_domain(self) -> TodayLog:
        return TodayLog(food_name=self.food_name, meal_slot=self.meal_slot)


class OpenSessionRequest(BaseModel):
    """Request body for starting a prediction session."""

    todays_logs: list[TodayLogPayload] = Field(default_factory=list)


class AcceptedLogPayload(BaseModel):
    """Log entry created from an accepted suggestion."""

    log_id: str
    food_name: str
    food_id: str
    grams: float
    meal_slot: MealSlot | None
    calendar_date: str | None
    logged_at: datetime | None
    calculated: MacrosPayload

    @classmethod
    def from_record(
        cls, log_id: str, record: HistoricalLogRecord
    ) -> "AcceptedLogPayload":
        return cls(
            log_id=log_id,
            food_name=record.food_identity,
            food_id=record.food_id,
            grams=record.grams,
            meal_slot=record.meal_slot,
            calendar_date=record.calendar_date,
            logged_at=record.precise_moment,
            calculated=MacrosPayload.from_profile(record.macros),
        )


class TimezoneRequest(BaseModel):
    """Request body for updating a user's timezone."""

    timezone: str
