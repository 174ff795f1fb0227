"""
Response models for vidproxy.

Every field carries a default so the serialized shape of a success envelope
never depends on what the upstream platform returned.
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional, Literal, Union

from app.core.formatting import iso_timestamp


class Meta(BaseModel):
    """Meta block attached to every envelope."""

    timestamp: str = Field(default_factory=iso_timestamp, description="Response creation time (ISO-8601, UTC)")
    version: str = Field("1.0", description="API version")
    creator: str = Field("", description="Service creator tag")


# TikTok

class TikTokVideoInfo(BaseModel):
    id: str = ""
    title: str = "No title"
    caption: str = "No caption"
    original_url: str = ""
    created_at: str = ""
    created_at_pretty: str = ""
    duration: int = 0
    duration_formatted: str = "00:00"
    resolution: str = ""
    cover_image: str = ""
    dynamic_cover: str = ""
    width: int = 0
    height: int = 0
    ratio: str = "9:16"


class TikTokStatistics(BaseModel):
    likes: int = 0
    likes_formatted: str = "0"
    comments: int = 0
    shares: int = 0
    plays: int = 0
    plays_formatted: str = "0"
    saves: int = 0


class TikTokDownloadLink(BaseModel):
    url: str = ""
    quality: str = ""
    server: str = ""


class TikTokDownloadLinks(BaseModel):
    no_watermark: TikTokDownloadLink = Field(default_factory=TikTokDownloadLink)
    with_watermark: TikTokDownloadLink = Field(default_factory=TikTokDownloadLink)


class TikTokMusic(BaseModel):
    id: str = ""
    title: str = ""
    author: str = "Unknown"
    album: str = ""
    duration: int = 0
    duration_formatted: str = "00:00"
    cover: str = ""
    play_url: str = ""


class TikTokAuthor(BaseModel):
    id: str = ""
    username: str = ""
    nickname: str = ""
    bio: str = ""
    avatar: str = ""
    followers: int = 0
    following: int = 0
    likes: int = 0
    verified: bool = False


class TikTokData(BaseModel):
    """Normalized TikTok payload."""

    video_info: TikTokVideoInfo = Field(default_factory=TikTokVideoInfo)
    statistics: TikTokStatistics = Field(default_factory=TikTokStatistics)
    download_links: TikTokDownloadLinks = Field(default_factory=TikTokDownloadLinks)
    music: TikTokMusic = Field(default_factory=TikTokMusic)
    author: TikTokAuthor = Field(default_factory=TikTokAuthor)


# YouTube

class YouTubeChannel(BaseModel):
    id: str = ""
    name: str = "Unknown"
    url: str = ""


class YouTubeVideoInfo(BaseModel):
    id: str = ""
    title: str = ""
    description: str = "No description"
    original_url: str = ""
    duration: int = 0
    duration_formatted: str = "00:00"
    view_count: int = 0
    thumbnail: str = ""
    keywords: List[str] = Field(default_factory=list)
    is_live: bool = False
    upload_date: str = ""
    channel: YouTubeChannel = Field(default_factory=YouTubeChannel)


class YouTubeDownloadLink(BaseModel):
    """A convenience download (the 360p MP4 or the best audio stream)."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = ""
    quality: str = ""
    mime_type: str = Field("", alias="mimeType")
    bitrate: int = 0
    size: str = "Unknown"
    filename: str = ""


class YouTubeFormat(BaseModel):
    """One stream variant as listed under ``other_formats``."""

    model_config = ConfigDict(populate_by_name=True)

    itag: str = ""
    url: str = ""
    mime_type: str = Field("", alias="mimeType")
    quality: str = ""
    audio_bitrate: int = Field(0, alias="audioBitrate")
    container: str = ""
    codecs: str = ""
    size: str = "Unknown"


class YouTubeDownloadLinks(BaseModel):
    mp4: YouTubeDownloadLink = Field(default_factory=YouTubeDownloadLink)
    mp3: YouTubeDownloadLink = Field(default_factory=YouTubeDownloadLink)
    other_formats: List[YouTubeFormat] = Field(default_factory=list)


class YouTubeData(BaseModel):
    """Normalized YouTube payload."""

    video_info: YouTubeVideoInfo = Field(default_factory=YouTubeVideoInfo)
    download_links: YouTubeDownloadLinks = Field(default_factory=YouTubeDownloadLinks)


class Envelope(BaseModel):
    """Uniform wrapper for success and error outcomes."""

    status: Literal['success', 'error'] = Field(..., description="Outcome")
    code: int = Field(..., description="HTTP status mirrored into the body")
    message: str = Field(..., description="Human-readable message")
    data: Optional[Union[TikTokData, YouTubeData]] = Field(None, description="Platform payload, null on error")
    meta: Meta = Field(default_factory=Meta)

    @classmethod
    def success(cls, message: str, data: Union[TikTokData, YouTubeData], meta: Meta) -> "Envelope":
        return cls(status="success", code=200, message=message, data=data, meta=meta)

    @classmethod
    def error(cls, message: str, code: int, meta: Meta) -> "Envelope":
        return cls(status="error", code=code, message=message, data=None, meta=meta)

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    def to_content(self) -> dict:
        """JSON-ready dict using the public (camelCase where needed) field names."""
        return self.model_dump(mode="json", by_alias=True)


class ClientErrorResponse(BaseModel):
    """Body returned for rejected input and unexpected failures."""

    status: bool = False
    message: str
    stack: Optional[str] = None
