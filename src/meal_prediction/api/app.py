"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from meal_prediction.api.models import (
    AcceptedLogPayload,
    OpenSessionRequest,
    SessionPayload,
    TimezoneRequest,
)
from meal_prediction.app_logging import configure_logging
from meal_prediction.containers import AppContainer
from meal_prediction.services.user_settings import is_valid_timezone


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/users/{user_id}/prediction")
    async def open_prediction(
        user_id: str, request: Request, body: OpenSessionRequest | None = None
    ) -> SessionPayload:
        """Start a new prediction session and return its resolved state."""
        state_container: AppContainer = request.app.state.container
        todays_logs = [log.to_domain() for log in body.todays_logs] if body else []
        session = await state_container.prediction_service.open_session(
            user_id, todays_logs
        )
        if session.closed:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Superseded by a newer prediction request.",
            )
        return SessionPayload.from_session(session)

    @app.get("/users/{user_id}/prediction")
    async def get_prediction(user_id: str, request: Request) -> SessionPayload:
        """Return the user's current prediction session."""
        state_container: AppContainer = request.app.state.container
        session = state_container.prediction_service.get_session(user_id)
        if session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return SessionPayload.from_session(session)

    @app.post("/users/{user_id}/prediction/dismiss")
    async def dismiss_prediction(user_id: str, request: Request) -> SessionPayload:
        """Dismiss the user's suggestion for the rest of the session."""
        state_container: AppContainer = request.app.state.container
        session = state_container.prediction_service.dismiss(user_id)
        if session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return SessionPayload.from_session(session)

    @app.post("/users/{user_id}/prediction/accept")
    async def accept_prediction(user_id: str, request: Request) -> AcceptedLogPayload:
        """Log the suggested food for the current meal."""
        state_container: AppContainer = request.app.state.container
        service = state_container.prediction_service
        if service.get_session(user_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        try:
            accepted = service.accept(user_id)
        except RuntimeError as exc:
            logger.exception(
                "Failed to log accepted prediction", extra={"user_id": user_id}
            )
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Could not save the meal log.",
            ) from exc
        if accepted is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="No suggestion to accept.",
            )
        log_id, record = accepted
        return AcceptedLogPayload.from_record(log_id, record)

    @app.put("/users/{user_id}/timezone")
    async def set_timezone(
        user_id: str, body: TimezoneRequest, request: Request
    ) -> dict[str, str]:
        """Store the timezone used to derive the user's wall-clock time."""
        state_container: AppContainer = request.app.state.container
        timezone = body.timezone.strip()
        if not is_valid_timezone(timezone):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown timezone: {timezone}",
            )
        state_container.user_settings_service.set_timezone(user_id, timezone)
        return {"timezone": timezone}

    return app
