"""
YouTube API endpoint for vidproxy.

GET /api/youtube?url=... returns video info, channel data and the MP4 / MP3
download links for a YouTube video.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.api.dependencies import get_video_processor
from app.models.response import ClientErrorResponse
from app.models.validators import is_youtube_request_url
from app.services.video_processor import VideoProcessor


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["youtube"])


@router.get(
    "/youtube",
    responses={
        200: {"description": "YouTube video data retrieved successfully"},
        400: {"model": ClientErrorResponse, "description": "Missing or invalid YouTube URL"},
        500: {"model": ClientErrorResponse, "description": "Internal server error"},
    },
    summary="Get YouTube video data",
)
async def get_youtube(
    url: Optional[str] = Query(None, description="YouTube video URL"),
    processor: VideoProcessor = Depends(get_video_processor),
) -> JSONResponse:
    """
    Fetch and normalize a YouTube video.

    The URL must contain ``youtube.com`` or ``youtu.be``; otherwise nothing is
    fetched and a 400 is returned.
    """
    if not is_youtube_request_url(url):
        return JSONResponse(
            status_code=400,
            content=ClientErrorResponse(message="Please provide a valid YouTube URL").model_dump(exclude_none=True),
        )

    logger.info(f"YouTube request for URL: {url}")
    envelope = await processor.get_youtube(url)
    return JSONResponse(status_code=envelope.code, content=envelope.to_content())
