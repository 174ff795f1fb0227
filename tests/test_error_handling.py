"""
Unit tests for the error taxonomy and yt-dlp error classification.
"""

import pytest

from app.core.exceptions import (
    ErrorCode, VidProxyException, InvalidURLError, MetadataNotFoundError,
    VideoNotFoundError, VideoPrivateError, FormatNotAvailableError,
    ExtractionError, ProcessingTimeoutError, NetworkError,
    RateLimitExceededError, classify_yt_dlp_error
)


class TestVidProxyExceptions:
    """Test the exception classes."""

    def test_base_exception(self):
        exc = VidProxyException(
            message="Test error",
            error_code=ErrorCode.EXTRACTION_FAILED,
            status_code=500,
            details={"key": "value"},
        )

        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.error_code == ErrorCode.EXTRACTION_FAILED
        assert exc.details == {"key": "value"}

    @pytest.mark.parametrize("exc,status,code", [
        (InvalidURLError(), 400, ErrorCode.INVALID_URL),
        (MetadataNotFoundError(), 404, ErrorCode.METADATA_NOT_FOUND),
        (VideoNotFoundError(), 404, ErrorCode.VIDEO_NOT_FOUND),
        (VideoPrivateError(), 403, ErrorCode.VIDEO_PRIVATE),
        (FormatNotAvailableError("18"), 404, ErrorCode.FORMAT_NOT_AVAILABLE),
        (ExtractionError(), 500, ErrorCode.EXTRACTION_FAILED),
        (NetworkError(), 502, ErrorCode.NETWORK_ERROR),
        (ProcessingTimeoutError(5.0), 504, ErrorCode.PROCESSING_TIMEOUT),
        (RateLimitExceededError(), 429, ErrorCode.RATE_LIMIT_EXCEEDED),
    ])
    def test_status_codes(self, exc, status, code):
        assert exc.status_code == status
        assert exc.error_code == code

    def test_messages(self):
        assert ExtractionError("Video data extraction failed").message == "Video data extraction failed"
        assert NetworkError("refused").message == "Network error occurred: refused"
        assert ProcessingTimeoutError(5.0).message == "Processing timed out after 5 seconds"
        assert FormatNotAvailableError("18").message == "Format '18' is not available for this video"
        assert RateLimitExceededError(retry_after=60).details["retry_after"] == 60


class TestClassifyYtDlpError:
    """Test mapping of yt-dlp error messages."""

    @pytest.mark.parametrize("message,expected", [
        ("ERROR: [youtube] abc: Private video. Sign in if you've been granted access", VideoPrivateError),
        ("ERROR: [youtube] abc: Video unavailable", VideoNotFoundError),
        ("ERROR: This video has been removed by the uploader", VideoNotFoundError),
        ("HTTP Error 404: Not Found", VideoNotFoundError),
        ("ERROR: Read timed out", NetworkError),
        ("ERROR: Unable to download webpage: connection refused", NetworkError),
        ("ERROR: Sign in to confirm your age", ExtractionError),
    ])
    def test_classification(self, message, expected):
        assert isinstance(classify_yt_dlp_error(message), expected)

    def test_unclassified_keeps_message(self):
        error = classify_yt_dlp_error("ERROR: something odd")

        assert error.message == "ERROR: something odd"
