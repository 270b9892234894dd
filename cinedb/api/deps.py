# cinedb/api/deps.py

from fastapi import Request

from cinedb.core.config import Settings
from cinedb.core.store import Models


def get_models(request: Request) -> Models:
    return request.app.state.models


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
