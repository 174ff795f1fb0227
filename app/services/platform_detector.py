"""
Platform detection and URL processing service for vidproxy.

This module recognizes TikTok and YouTube links, tells TikTok share links
apart from canonical video links and extracts the platform video ids.
"""

import re
from typing import Optional
from urllib.parse import urlparse, parse_qs


class PlatformDetector:
    """Platform detection and URL processing service."""

    # Substrings the endpoint layer accepts before doing any work
    DOMAIN_TOKENS = {
        'tiktok': ['tiktok.com'],
        'youtube': ['youtube.com', 'youtu.be'],
    }

    TIKTOK_SHORT_DOMAINS = ['vm.tiktok.com', 'vt.tiktok.com']

    TIKTOK_ID_PATTERNS = [
        re.compile(r'video/(\d+)'),
        re.compile(r'/(\d{15,})'),
    ]

    YOUTUBE_HOSTS = {
        'youtube.com', 'www.youtube.com', 'm.youtube.com', 'music.youtube.com',
        'gaming.youtube.com', 'youtube-nocookie.com', 'www.youtube-nocookie.com',
    }
    YOUTUBE_SHORT_HOSTS = {'youtu.be', 'www.youtu.be'}
    YOUTUBE_PATH_PREFIXES = ['/embed/', '/v/', '/shorts/', '/live/', '/e/']
    YOUTUBE_ID = re.compile(r'^[a-zA-Z0-9_-]{11}$')

    YOUTUBE_WATCH_URL = 'https://www.youtube.com/watch?v={video_id}'

    @classmethod
    def has_domain_token(cls, url: Optional[str], platform: str) -> bool:
        """Cheap substring check used by the endpoints before any outbound call."""
        if not url or not isinstance(url, str):
            return False
        return any(token in url for token in cls.DOMAIN_TOKENS.get(platform, []))

    @classmethod
    def is_tiktok_short_link(cls, url: str) -> bool:
        return any(domain in url for domain in cls.TIKTOK_SHORT_DOMAINS)

    @classmethod
    def extract_tiktok_id(cls, url: str) -> Optional[str]:
        """
        Extract the numeric TikTok video id.

        Tries ``video/<digits>`` first, then any bare path segment of at
        least 15 digits.

        Args:
            url: Canonical TikTok video URL

        Returns:
            Video id if found, None otherwise
        """
        if not url:
            return None
        for pattern in cls.TIKTOK_ID_PATTERNS:
            match = pattern.search(url)
            if match:
                return match.group(1)
        return None

    @classmethod
    def extract_youtube_id(cls, url: str) -> Optional[str]:
        """
        Extract the canonical 11 character YouTube video id.

        Accepts watch, embed, shorts, live and youtu.be links on the known
        YouTube hosts.

        Args:
            url: YouTube URL

        Returns:
            Video id if the URL is a recognized YouTube video link, None otherwise
        """
        if not url or not isinstance(url, str):
            return None

        url = url.strip()
        if not re.match(r'^https?://', url, re.IGNORECASE):
            url = f'https://{url}'

        try:
            parsed = urlparse(url)
        except ValueError:
            return None

        host = (parsed.hostname or '').lower()
        video_id = None

        if host in cls.YOUTUBE_SHORT_HOSTS:
            video_id = parsed.path.lstrip('/').split('/')[0]
        elif host in cls.YOUTUBE_HOSTS:
            query_id = parse_qs(parsed.query).get('v')
            if query_id:
                video_id = query_id[0]
            else:
                for prefix in cls.YOUTUBE_PATH_PREFIXES:
                    if parsed.path.startswith(prefix):
                        video_id = parsed.path[len(prefix):].split('/')[0]
                        break

        if video_id:
            video_id = video_id[:11]
            if cls.YOUTUBE_ID.match(video_id):
                return video_id
        return None

    @classmethod
    def youtube_watch_url(cls, video_id: str) -> str:
        return cls.YOUTUBE_WATCH_URL.format(video_id=video_id)
