"""ASGI entrypoint for the meal prediction API."""

from meal_prediction.api.app import create_app
from meal_prediction.containers import build_container

app = create_app(build_container())
