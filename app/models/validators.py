"""
URL validation functions for supported platforms.
"""

from typing import Optional

from app.services.platform_detector import PlatformDetector


def is_tiktok_request_url(url: Optional[str]) -> bool:
    """Endpoint check: the URL must mention tiktok.com."""
    return PlatformDetector.has_domain_token(url, 'tiktok')


def is_youtube_request_url(url: Optional[str]) -> bool:
    """Endpoint check: the URL must mention youtube.com or youtu.be."""
    return PlatformDetector.has_domain_token(url, 'youtube')
