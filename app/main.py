from pathlib import Path
from typing import Optional
import logging

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from app.api.tiktok import router as tiktok_router
from app.api.youtube import router as youtube_router
from app.core.config import Settings
from app.middleware.error_handler import ErrorHandlingMiddleware
from app.middleware.rate_limiter import RateLimiter, RateLimitConfig, rate_limit_middleware


logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def _static_file(static_dir: Path, path: str) -> Optional[Path]:
    """Resolve ``path`` inside ``static_dir``; None if missing or outside it."""
    root = static_dir.resolve()
    candidate = (root / path).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around an explicit settings object."""
    settings = settings or Settings.from_env()
    configure_logging(settings)

    app = FastAPI(
        title="vidproxy",
        description="TikTok and YouTube video data and download link API",
        version=settings.api_version,
    )
    app.state.settings = settings
    app.state.http_client = None
    app.state.rate_limiter = (
        RateLimiter(RateLimitConfig.from_settings(settings)) if settings.rate_limit_enabled else None
    )

    # Error handling middleware (added first, so it sits innermost)
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.debug)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting middleware
    app.middleware("http")(rate_limit_middleware)

    app.include_router(tiktok_router)
    app.include_router(youtube_router)

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Starting vidproxy with {settings!r}")
        app.state.http_client = httpx.AsyncClient()
        if app.state.rate_limiter is not None:
            await app.state.rate_limiter.initialize()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down vidproxy")
        if app.state.http_client is not None:
            await app.state.http_client.aclose()
            app.state.http_client = None
        if app.state.rate_limiter is not None:
            await app.state.rate_limiter.cleanup()

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    static_dir = Path(settings.static_dir)

    # Static assets, with the front-end entry point for every other path
    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str):
        asset = _static_file(static_dir, full_path) if full_path else None
        if asset is not None:
            return FileResponse(asset)

        index = _static_file(static_dir, "index.html")
        if index is None:
            return JSONResponse(status_code=404, content={"status": False, "message": "Not found"})
        return FileResponse(index)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
