"""
Pytest configuration and fixtures for the vidproxy test suite.

This module provides shared fixtures and configuration for all tests.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app


TIKTOK_VIDEO_ID = "7234567890123456789"
TIKTOK_URL = f"https://www.tiktok.com/@someone/video/{TIKTOK_VIDEO_ID}"


@pytest.fixture
def settings():
    """Settings with rate limiting off and production error output."""
    return Settings(rate_limit_enabled=False, static_dir="does-not-exist")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client without lifespan events (no shared HTTP client)."""
    return TestClient(app)


@pytest.fixture
def tiktok_item():
    """A complete itemStruct record as found in the rehydration blob."""
    return {
        "id": TIKTOK_VIDEO_ID,
        "desc": "Dancing in the rain #fyp",
        "createTime": 1704467220,
        "video": {
            "duration": 125,
            "width": 1080,
            "height": 1920,
            "ratio": "720p",
            "cover": "https://p16.tiktokcdn.com/cover.jpg",
            "dynamicCover": "https://p16.tiktokcdn.com/dynamic.webp",
            "downloadAddr": "https://v16.tiktokcdn.com/watermarked.mp4",
        },
        "stats": {
            "diggCount": 1500,
            "commentCount": 42,
            "shareCount": 7,
            "playCount": 2500000,
            "collectCount": 99,
        },
        "music": {
            "id": "6800000000000000000",
            "title": "Rain Song",
            "authorName": "Singer",
            "album": "Weather",
            "duration": 61,
            "coverMedium": "https://p16.tiktokcdn.com/music.jpg",
            "playUrl": "https://sf16.tiktokcdn.com/music.mp3",
        },
        "author": {
            "id": "6700000000000000000",
            "uniqueId": "someone",
            "nickname": "Some One",
            "signature": "hello",
            "avatarLarger": "https://p16.tiktokcdn.com/avatar.jpg",
            "verified": True,
        },
        "authorStats": {
            "followerCount": 12000,
            "followingCount": 150,
            "heartCount": 340000,
        },
    }


def make_tiktok_page(item, scope_key="webapp.video-detail"):
    """Render a minimal TikTok video page embedding ``item``."""
    if scope_key == "webapp.video-detail":
        scope = {"webapp.video-detail": {"itemInfo": {"itemStruct": item}}}
    else:
        scope = {"webapp": {"videoDetail": {"itemInfo": {"itemStruct": item}}}}
    blob = json.dumps({"__DEFAULT_SCOPE__": scope})
    return (
        "<html><head></head><body>"
        f'<script id="__UNIVERSAL_DATA_FOR_REHYDRATION__" type="application/json">{blob}</script>'
        "</body></html>"
    )


@pytest.fixture
def tiktok_page(tiktok_item):
    return make_tiktok_page(tiktok_item)


def mobile_api_payload(play_url="https://v19.tiktokv.com/nowatermark.mp4"):
    return {"aweme_list": [{"video": {"play_addr": {"url_list": [play_url]}}}]}


def make_tiktok_transport(page_html, api_handler=None, head_location=None, calls=None):
    """
    Build an httpx.MockTransport simulating the TikTok endpoints.

    ``api_handler`` receives the mobile API request and returns a response or
    raises; by default the API answers with an empty feed.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        host = request.url.host

        if request.method == "HEAD":
            headers = {"location": head_location} if head_location else {}
            return httpx.Response(301 if head_location else 200, headers=headers)

        if host.endswith("tiktokv.com"):
            if api_handler is not None:
                return api_handler(request)
            return httpx.Response(200, json={"aweme_list": []})

        if host.endswith("tiktok.com"):
            return httpx.Response(200, text=page_html)

        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def ytdlp_info():
    """A trimmed yt-dlp info dict for a YouTube video."""
    return {
        "id": "dQw4w9WgXcQ",
        "title": "Never Gonna Give You Up!",
        "description": "The official video",
        "duration": 212,
        "view_count": 1500000000,
        "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
        "thumbnails": [
            {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/default.jpg"},
            {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"},
        ],
        "tags": ["rick", "astley"],
        "is_live": False,
        "was_live": False,
        "upload_date": "20091025",
        "channel_id": "UCuAXFkgsw1L7xaCfnd5JJOw",
        "channel": "Rick Astley",
        "channel_url": "https://www.youtube.com/channel/UCuAXFkgsw1L7xaCfnd5JJOw",
        "formats": [
            {
                "format_id": "139",
                "url": "https://rr.googlevideo.com/139",
                "ext": "m4a",
                "vcodec": "none",
                "acodec": "mp4a.40.5",
                "abr": 48.0,
                "tbr": 48.8,
                "filesize": 1290000,
            },
            {
                "format_id": "140",
                "url": "https://rr.googlevideo.com/140",
                "ext": "m4a",
                "vcodec": "none",
                "acodec": "mp4a.40.2",
                "abr": 129.5,
                "tbr": 130.0,
                "filesize": 3433728,
            },
            {
                "format_id": "18",
                "url": "https://rr.googlevideo.com/18",
                "ext": "mp4",
                "vcodec": "avc1.42001E",
                "acodec": "mp4a.40.2",
                "height": 360,
                "width": 640,
                "format_note": "360p",
                "tbr": 503.2,
                "filesize_approx": 13369344,
            },
            {
                "format_id": "137",
                "url": "https://rr.googlevideo.com/137",
                "ext": "mp4",
                "vcodec": "avc1.640028",
                "acodec": "none",
                "height": 1080,
                "format_note": "1080p",
                "tbr": 4400.0,
            },
            {
                "format_id": "sb0",
                "ext": "mhtml",
                "vcodec": "none",
                "acodec": "none",
            },
        ],
    }


@pytest.fixture
def page_factory():
    return make_tiktok_page


@pytest.fixture
def transport_factory():
    return make_tiktok_transport


@pytest.fixture
def api_payload_factory():
    return mobile_api_payload
