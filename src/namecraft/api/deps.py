"""Dependency injection for API handlers."""

from typing import Annotated

from fastapi import Depends, Request

from namecraft.config import Settings, get_settings
from namecraft.core.gateway import UpstreamGateway
from namecraft.core.history import HistoryStore


def get_settings_dependency(request: Request) -> Settings:
    """Get application settings.

    Prefers the settings the app was created with, so handlers and
    middleware agree. Override this dependency in tests.
    """
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


def get_request_id(request: Request) -> str | None:
    """Extract request ID from request state.

    The request ID is set by the request ID middleware.
    """
    return getattr(request.state, "request_id", None)


RequestIdDep = Annotated[str | None, Depends(get_request_id)]


def get_gateway(request: Request, settings: SettingsDep) -> UpstreamGateway:
    """Get the upstream gateway attached to the app, or build one from settings."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        gateway = UpstreamGateway.from_settings(settings)
    return gateway


GatewayDep = Annotated[UpstreamGateway, Depends(get_gateway)]


def get_history_store(request: Request) -> HistoryStore | None:
    """Get the history store, or None when history is disabled."""
    return getattr(request.app.state, "history", None)


HistoryDep = Annotated[HistoryStore | None, Depends(get_history_store)]
