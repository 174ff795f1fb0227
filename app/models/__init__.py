"""
Data models package for vidproxy.

This package contains the Pydantic response models and URL validation
functions.
"""

from .response import (
    Meta,
    Envelope,
    ClientErrorResponse,
    TikTokData,
    YouTubeData,
)
from .validators import (
    is_tiktok_request_url,
    is_youtube_request_url,
)

__all__ = [
    # Response models
    'Meta',
    'Envelope',
    'ClientErrorResponse',
    'TikTokData',
    'YouTubeData',

    # Validators
    'is_tiktok_request_url',
    'is_youtube_request_url',
]
