"""Health check and service information endpoints."""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from video_pipeline.core.config import settings, PlatformConfig
from video_pipeline.core.dependencies import get_platform_manager_dep
from video_pipeline.models.responses import (
    HealthData, DependencyStatus, SupportedPlatformsData,
    PlatformFeatures, PipelineLimits
)
from video_pipeline.platforms import PlatformServiceManager
from video_pipeline.utils.response_helpers import ResponseHelper

router = APIRouter(tags=["health"])

service_start_time = datetime.now()


def _configured(value: str) -> str:
    return "healthy" if value else "not_configured"


@router.get("/")
async def root():
    """Root endpoint."""
    return {"message": f"{settings.api_title} is running"}


@router.get("/health")
async def health_check(manager: PlatformServiceManager = Depends(get_platform_manager_dep)):
    """
    Health check endpoint with provider configuration status
    """
    uptime = int((datetime.now() - service_start_time).total_seconds())

    dependencies = DependencyStatus(
        yt_dlp="healthy",
        gemini=_configured(settings.gemini_api_key),
        rapidapi=_configured(settings.rapidapi_key),
        youtube_data_api=_configured(settings.youtube_api_key)
    )

    health_data = HealthData(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.api_version,
        uptime_seconds=uptime,
        dependencies=dependencies,
        platform_clients={
            platform: status["configured"]
            for platform, status in manager.get_clients_status().items()
        }
    )

    return JSONResponse(
        status_code=200,
        content=health_data.model_dump()
    )


@router.get("/supported-platforms")
async def get_supported_platforms():
    """
    Get list of supported platforms and their capabilities
    """
    request_id = ResponseHelper.generate_request_id()

    platforms = []
    for platform_name, config in PlatformConfig.SUPPORTED_PLATFORMS.items():
        platforms.append(PlatformFeatures(
            name=platform_name,
            domain=config["domains"][0],  # Primary domain
            supported_features=config["features"],
            url_patterns=config["url_patterns"]
        ))

    platforms_data = SupportedPlatformsData(
        platforms=platforms,
        limits=PipelineLimits(
            max_download_bytes=settings.max_download_bytes,
            transcription_timeout_seconds=settings.transcription_timeout,
            voice_analysis_batch_size=settings.voice_analysis_batch_size
        )
    )

    return ResponseHelper.create_success_response(platforms_data.model_dump(), request_id)
