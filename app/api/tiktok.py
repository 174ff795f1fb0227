"""
TikTok API endpoint for vidproxy.

GET /api/tiktok?url=... returns video info, statistics, music, author and
download links for a TikTok video or share link.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.api.dependencies import get_video_processor
from app.models.response import ClientErrorResponse
from app.models.validators import is_tiktok_request_url
from app.services.video_processor import VideoProcessor


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tiktok"])


@router.get(
    "/tiktok",
    responses={
        200: {"description": "Video data retrieved successfully"},
        400: {"model": ClientErrorResponse, "description": "Missing or invalid TikTok URL"},
        500: {"model": ClientErrorResponse, "description": "Internal server error"},
    },
    summary="Get TikTok video data",
)
async def get_tiktok(
    url: Optional[str] = Query(None, description="TikTok video or share link"),
    processor: VideoProcessor = Depends(get_video_processor),
) -> JSONResponse:
    """
    Fetch and normalize a TikTok video.

    The URL must contain ``tiktok.com``; otherwise nothing is fetched and a
    400 is returned. Upstream failures come back as an error envelope.
    """
    if not is_tiktok_request_url(url):
        return JSONResponse(
            status_code=400,
            content=ClientErrorResponse(message="Please provide a valid TikTok URL").model_dump(exclude_none=True),
        )

    logger.info(f"TikTok request for URL: {url}")
    envelope = await processor.get_tiktok(url)
    return JSONResponse(status_code=envelope.code, content=envelope.to_content())
