"""FastAPI dependencies for settings and upstream access."""

from fastapi import Request

from config.config import Settings
from upstream.client import UpstreamClient


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_upstream_client(request: Request) -> UpstreamClient:
    """Shared upstream client owned by the application."""
    return request.app.state.upstream
