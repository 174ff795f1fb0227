"""
Shared FastAPI dependencies.
"""

from fastapi import Request

from app.core.config import Settings
from app.services.video_processor import VideoProcessor


def get_settings(request: Request) -> Settings:
    """Settings built at startup and stored on the application."""
    return request.app.state.settings


def get_video_processor(request: Request) -> VideoProcessor:
    """VideoProcessor bound to the application settings and shared HTTP client."""
    return VideoProcessor(
        settings=get_settings(request),
        client=getattr(request.app.state, "http_client", None),
    )
