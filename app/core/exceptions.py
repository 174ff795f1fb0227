"""
Error taxonomy for vidproxy.

Every failure that can be turned into an error envelope is raised as a
subclass of VidProxyException carrying a stable error code and the HTTP
status used when the exception escapes a route.
"""

import logging
from typing import Dict, Any, Optional
from enum import Enum


logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for consistent error handling."""

    # Validation errors
    INVALID_URL = "invalid_url"

    # Video errors
    VIDEO_NOT_FOUND = "video_not_found"
    VIDEO_PRIVATE = "video_private"
    METADATA_NOT_FOUND = "metadata_not_found"
    FORMAT_NOT_AVAILABLE = "format_not_available"

    # Processing errors
    EXTRACTION_FAILED = "extraction_failed"
    PROCESSING_TIMEOUT = "processing_timeout"

    # System errors
    NETWORK_ERROR = "network_error"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"


class VidProxyException(Exception):
    """
    Base exception class for all vidproxy errors.

    Provides structured error information including error code,
    HTTP status and optional details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize vidproxy exception.

        Args:
            message: Human-readable error message
            error_code: Standardized error code
            status_code: HTTP status used when the error escapes a route
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class InvalidURLError(VidProxyException):
    """Raised when a URL cannot be used for the requested platform."""

    def __init__(self, message: str = "Invalid URL", url: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_URL,
            status_code=400,
            **kwargs
        )
        if url:
            self.details["url"] = url


class MetadataNotFoundError(VidProxyException):
    """Raised when a page carries no embedded metadata blob."""

    def __init__(self, message: str = "Metadata not found", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.METADATA_NOT_FOUND,
            status_code=404,
            **kwargs
        )


class VideoNotFoundError(VidProxyException):
    """Raised when the upstream platform reports the video as missing."""

    def __init__(self, message: str = "Video not found or is not accessible", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.VIDEO_NOT_FOUND,
            status_code=404,
            **kwargs
        )


class VideoPrivateError(VidProxyException):
    """Raised when video is private."""

    def __init__(self, **kwargs):
        super().__init__(
            message="This video is private and cannot be downloaded",
            error_code=ErrorCode.VIDEO_PRIVATE,
            status_code=403,
            **kwargs
        )


class FormatNotAvailableError(VidProxyException):
    """Raised when a required stream variant is absent upstream."""

    def __init__(self, format_id: str, **kwargs):
        super().__init__(
            message=f"Format '{format_id}' is not available for this video",
            error_code=ErrorCode.FORMAT_NOT_AVAILABLE,
            status_code=404,
            **kwargs
        )
        self.details["format_id"] = format_id


class ExtractionError(VidProxyException):
    """Raised when metadata extraction fails."""

    def __init__(self, reason: Optional[str] = None, **kwargs):
        super().__init__(
            message=reason or "Failed to extract video information",
            error_code=ErrorCode.EXTRACTION_FAILED,
            status_code=500,
            **kwargs
        )
        if reason:
            self.details["reason"] = reason


class ProcessingTimeoutError(VidProxyException):
    """Raised when an upstream call takes too long."""

    def __init__(self, timeout_seconds: float, **kwargs):
        super().__init__(
            message=f"Processing timed out after {timeout_seconds:g} seconds",
            error_code=ErrorCode.PROCESSING_TIMEOUT,
            status_code=504,
            **kwargs
        )
        self.details["timeout_seconds"] = timeout_seconds


class NetworkError(VidProxyException):
    """Raised when network operations fail."""

    def __init__(self, reason: Optional[str] = None, **kwargs):
        message = "Network error occurred"
        if reason:
            message += f": {reason}"

        super().__init__(
            message=message,
            error_code=ErrorCode.NETWORK_ERROR,
            status_code=502,
            **kwargs
        )
        if reason:
            self.details["reason"] = reason


class RateLimitExceededError(VidProxyException):
    """Raised when rate limits are exceeded."""

    def __init__(self, retry_after: Optional[int] = None, **kwargs):
        super().__init__(
            message="Too many requests, please try again later.",
            error_code=ErrorCode.RATE_LIMIT_EXCEEDED,
            status_code=429,
            **kwargs
        )
        if retry_after:
            self.details["retry_after"] = retry_after


def classify_yt_dlp_error(error_msg: str) -> VidProxyException:
    """
    Classify yt-dlp errors into appropriate vidproxy exceptions.

    Args:
        error_msg: Error message from yt-dlp

    Returns:
        Appropriate VidProxyException subclass
    """
    error_lower = error_msg.lower()

    if "private" in error_lower:
        return VideoPrivateError()

    if any(pattern in error_lower for pattern in [
        "video unavailable", "not available", "does not exist",
        "video not found", "404", "removed", "deleted"
    ]):
        return VideoNotFoundError()

    if "timed out" in error_lower or "timeout" in error_lower:
        return NetworkError(reason=error_msg)

    if any(pattern in error_lower for pattern in [
        "connection", "network", "unreachable", "name resolution"
    ]):
        return NetworkError(reason=error_msg)

    return ExtractionError(reason=error_msg)
