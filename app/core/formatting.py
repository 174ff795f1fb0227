"""
Display formatting helpers shared by the platform normalizers.
"""

import re
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

Number = Union[int, float]

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_duration(seconds: Optional[Number]) -> str:
    """Format seconds as ``MM:SS``; minutes are not rolled into hours."""
    total = max(int(seconds or 0), 0)
    mins, secs = divmod(total, 60)
    return f"{mins:02d}:{secs:02d}"


def format_file_size(size: Optional[Number]) -> str:
    """
    Format a byte count using the largest fitting unit.

    Examples:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(1536)
        '1.50 KB'
    """
    if not size or size <= 0:
        return "0 Bytes"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {_SIZE_UNITS[unit]}"


def format_count(num: Optional[Number]) -> str:
    """Abbreviate large counts: 1500 -> '1.5K', 2500000 -> '2.5M'."""
    num = num or 0
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(int(num))


def get_resolution(width: Optional[Number], height: Optional[Number]) -> str:
    """
    Map a frame size to a nominal quality label.

    The thresholds compare the raw height against the long edge of each tier,
    which is how portrait TikTok videos report their size.
    """
    if not width or not height:
        return ""
    if height >= 1920:
        return "1080p"
    if height >= 1280:
        return "720p"
    if height >= 720:
        return "480p"
    return "360p"


def format_timestamp(unix_seconds: Optional[Number]) -> Tuple[str, str]:
    """Return ``(iso, pretty)`` renderings of a Unix timestamp in UTC."""
    try:
        moment = datetime.fromtimestamp(float(unix_seconds or 0), tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        moment = datetime.fromtimestamp(0, tz=timezone.utc)
    return iso_timestamp(moment), pretty_timestamp(moment)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def pretty_timestamp(moment: datetime) -> str:
    # e.g. "January 5 2024 at 03:07 PM"
    return f"{moment.strftime('%B')} {moment.day} {moment.year} at {moment.strftime('%I:%M %p')}"


def clean_title(title: Optional[str]) -> str:
    """Strip everything but word characters and spaces, for use in filenames."""
    return re.sub(r"[^\w\s]", "", title or "").strip()
