"""
Services package for vidproxy.

This package contains platform detection, the per-platform fetchers and
normalizers, and the pipeline that ties them together.
"""

from .platform_detector import PlatformDetector
from .link_resolver import ShortLinkResolver
from .tiktok_fetcher import TikTokFetcher, TikTokRecord, PlayAddress
from .youtube_fetcher import YouTubeFetcher, YouTubeRecord, StreamVariant
from .normalizers import normalize_tiktok, normalize_youtube
from .video_processor import VideoProcessor

__all__ = [
    'PlatformDetector',
    # Fetchers
    'ShortLinkResolver',
    'TikTokFetcher',
    'TikTokRecord',
    'PlayAddress',
    'YouTubeFetcher',
    'YouTubeRecord',
    'StreamVariant',
    # Normalization and pipeline
    'normalize_tiktok',
    'normalize_youtube',
    'VideoProcessor',
]
