"""Dependency injection setup for FastAPI."""
from functools import lru_cache
from fastapi import Depends

from video_pipeline.platforms import PlatformServiceManager
from video_pipeline.services import (
    GeminiProvider, OrchestratorService, TranscriptionService,
    VideoDownloadService, VoiceAnalysisBatcher
)
from video_pipeline.utils.http_client import HttpClient


# Service instances cache
@lru_cache()
def get_http_client() -> HttpClient:
    """Get shared HttpClient instance."""
    return HttpClient()


@lru_cache()
def get_download_service() -> VideoDownloadService:
    """Get VideoDownloadService instance."""
    return VideoDownloadService(http_client=get_http_client())


@lru_cache()
def get_platform_manager() -> PlatformServiceManager:
    """Get PlatformServiceManager instance."""
    return PlatformServiceManager(http_client=get_http_client(), downloader=get_download_service())


@lru_cache()
def get_gemini_provider() -> GeminiProvider:
    """Get GeminiProvider instance."""
    return GeminiProvider()


@lru_cache()
def get_transcription_service() -> TranscriptionService:
    """Get TranscriptionService instance."""
    return TranscriptionService(provider=get_gemini_provider(), downloader=get_download_service())


@lru_cache()
def get_voice_analysis_batcher() -> VoiceAnalysisBatcher:
    """Get VoiceAnalysisBatcher instance."""
    return VoiceAnalysisBatcher(provider=get_gemini_provider())


@lru_cache()
def get_orchestrator() -> OrchestratorService:
    """Get OrchestratorService instance."""
    return OrchestratorService(http_client=get_http_client(), batcher=get_voice_analysis_batcher())


# Service dependencies
def get_platform_manager_dep(
    manager: PlatformServiceManager = Depends(get_platform_manager)
) -> PlatformServiceManager:
    """Dependency for PlatformServiceManager."""
    return manager


def get_transcription_service_dep(
    service: TranscriptionService = Depends(get_transcription_service)
) -> TranscriptionService:
    """Dependency for TranscriptionService."""
    return service


def get_orchestrator_dep(
    orchestrator: OrchestratorService = Depends(get_orchestrator)
) -> OrchestratorService:
    """Dependency for OrchestratorService."""
    return orchestrator


def get_voice_analysis_batcher_dep(
    batcher: VoiceAnalysisBatcher = Depends(get_voice_analysis_batcher)
) -> VoiceAnalysisBatcher:
    """Dependency for VoiceAnalysisBatcher."""
    return batcher
