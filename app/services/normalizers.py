"""
Mapping of raw platform records onto the stable response schema.

Each output field is looked up and defaulted on its own, so a missing or
malformed nested object only blanks the fields that come from it.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from app.core.formatting import (
    clean_title, format_count, format_duration, format_file_size,
    format_timestamp, get_resolution, iso_timestamp
)
from app.models.response import (
    TikTokAuthor, TikTokData, TikTokDownloadLink, TikTokDownloadLinks,
    TikTokMusic, TikTokStatistics, TikTokVideoInfo,
    YouTubeChannel, YouTubeData, YouTubeDownloadLink, YouTubeDownloadLinks,
    YouTubeFormat, YouTubeVideoInfo
)
from app.services.tiktok_fetcher import PlayAddress
from app.services.youtube_fetcher import StreamVariant


logger = logging.getLogger(__name__)


def _section(record: Any, key: str) -> Dict[str, Any]:
    """Nested object or an empty dict when absent or of the wrong type."""
    if not isinstance(record, dict):
        return {}
    value = record.get(key)
    return value if isinstance(value, dict) else {}


def _str(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return str(value)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


# TikTok

def normalize_tiktok(item: Dict[str, Any], original_url: str, play: PlayAddress) -> TikTokData:
    """
    Build the TikTok payload from an ``itemStruct`` record.

    Args:
        item: Raw item record (native TikTok field names)
        original_url: URL the video was fetched from (after short-link expansion)
        play: No-watermark play address from the strategy chain
    """
    video = _section(item, "video")
    stats = _section(item, "stats")
    music = _section(item, "music")
    author = _section(item, "author")
    author_stats = _section(item, "authorStats")

    desc = _str(item.get("desc"))
    created_at, created_at_pretty = format_timestamp(_int(item.get("createTime")))
    duration = _int(video.get("duration"))
    width = _int(video.get("width"))
    height = _int(video.get("height"))

    video_info = TikTokVideoInfo(
        id=_str(item.get("id")),
        title=desc or "No title",
        caption=desc or "No caption",
        original_url=original_url,
        created_at=created_at,
        created_at_pretty=created_at_pretty,
        duration=duration,
        duration_formatted=format_duration(duration),
        resolution=get_resolution(width, height),
        cover_image=_str(video.get("cover")),
        dynamic_cover=_str(video.get("dynamicCover")),
        width=width,
        height=height,
        ratio=_str(video.get("ratio"), "9:16"),
    )

    likes = _int(stats.get("diggCount"))
    plays = _int(stats.get("playCount"))
    statistics = TikTokStatistics(
        likes=likes,
        likes_formatted=format_count(likes),
        comments=_int(stats.get("commentCount")),
        shares=_int(stats.get("shareCount")),
        plays=plays,
        plays_formatted=format_count(plays),
        saves=_int(stats.get("collectCount")),
    )

    download_links = TikTokDownloadLinks(
        no_watermark=TikTokDownloadLink(url=play.url, quality=play.quality, server=play.server),
        with_watermark=TikTokDownloadLink(
            url=_str(video.get("downloadAddr")),
            quality="HD",
            server="tiktok.com",
        ),
    )

    music_author = _str(music.get("authorName"))
    music_duration = _int(music.get("duration"))
    music_info = TikTokMusic(
        id=_str(music.get("id")),
        title=_str(music.get("title"), f"Original Sound - {music_author}"),
        author=music_author or "Unknown",
        album=_str(music.get("album")),
        duration=music_duration,
        duration_formatted=format_duration(music_duration),
        cover=_str(music.get("coverMedium")),
        play_url=_str(music.get("playUrl")),
    )

    author_info = TikTokAuthor(
        id=_str(author.get("id")),
        username=_str(author.get("uniqueId")),
        nickname=_str(author.get("nickname")),
        bio=_str(author.get("signature")),
        avatar=_str(author.get("avatarLarger")),
        followers=_int(author_stats.get("followerCount")),
        following=_int(author_stats.get("followingCount")),
        likes=_int(author_stats.get("heartCount")),
        verified=_bool(author.get("verified")),
    )

    return TikTokData(
        video_info=video_info,
        statistics=statistics,
        download_links=download_links,
        music=music_info,
        author=author_info,
    )


# YouTube

def _upload_date(value: Any) -> str:
    """yt-dlp reports ``YYYYMMDD``; fall back to now when absent."""
    raw = _str(value)
    if len(raw) == 8 and raw.isdigit():
        return f"{raw[:4]}-{raw[4:6]}-{raw[6:]}"
    return raw or iso_timestamp()


def _thumbnail(info: Dict[str, Any]) -> str:
    thumbnails = info.get("thumbnails")
    if isinstance(thumbnails, list) and thumbnails:
        last = thumbnails[-1]
        if isinstance(last, dict) and last.get("url"):
            return _str(last["url"])
    return _str(info.get("thumbnail"))


def _size(variant: StreamVariant) -> str:
    return format_file_size(variant.content_length) if variant.content_length else "Unknown"


def _download_link(variant: Optional[StreamVariant], quality: str, filename: str) -> YouTubeDownloadLink:
    if variant is None:
        return YouTubeDownloadLink(quality=quality, filename=filename)
    return YouTubeDownloadLink(
        url=variant.url,
        quality=quality,
        mime_type=variant.mime_type,
        bitrate=variant.bitrate,
        size=_size(variant),
        filename=filename,
    )


def normalize_youtube(
    info: Dict[str, Any],
    original_url: str,
    variants: List[StreamVariant],
    mp4: Optional[StreamVariant],
    audio: Optional[StreamVariant],
    timestamp_ms: Optional[int] = None,
) -> YouTubeData:
    """
    Build the YouTube payload from a yt-dlp info dict and its stream variants.

    ``timestamp_ms`` suffixes the download filenames; defaults to now.
    """
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    title = _str(info.get("title"))
    duration = _int(info.get("duration"))
    keywords = info.get("tags")

    video_info = YouTubeVideoInfo(
        id=_str(info.get("id")),
        title=title,
        description=_str(info.get("description"), "No description"),
        original_url=original_url,
        duration=duration,
        duration_formatted=format_duration(duration),
        view_count=_int(info.get("view_count")),
        thumbnail=_thumbnail(info),
        keywords=[str(k) for k in keywords] if isinstance(keywords, list) else [],
        is_live=_bool(info.get("is_live") or info.get("was_live")),
        upload_date=_upload_date(info.get("upload_date")),
        channel=YouTubeChannel(
            id=_str(info.get("channel_id")),
            name=_str(info.get("channel") or info.get("uploader"), "Unknown"),
            url=_str(info.get("channel_url") or info.get("uploader_url")),
        ),
    )

    stem = clean_title(title)
    download_links = YouTubeDownloadLinks(
        mp4=_download_link(mp4, mp4.quality_label if mp4 else "", f"{stem}_{timestamp_ms}.mp4"),
        mp3=_download_link(audio, "Audio", f"{stem}_{timestamp_ms}.mp3"),
        other_formats=[
            YouTubeFormat(
                itag=variant.itag,
                url=variant.url,
                mime_type=variant.mime_type,
                quality=variant.quality_label,
                audio_bitrate=variant.audio_bitrate,
                container=variant.container,
                codecs=variant.codecs,
                size=_size(variant),
            )
            for variant in variants
        ],
    )

    return YouTubeData(video_info=video_info, download_links=download_links)
