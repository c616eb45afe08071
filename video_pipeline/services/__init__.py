"""Service layer modules for the Video Pipeline Service."""
from .cache_service import CacheService
from .download_service import VideoDownloadService
from .gemini_provider import GeminiProvider, RemoteFile
from .transcription_service import TranscriptionService
from .voice_analysis import VoiceAnalysisBatcher
from .orchestrator import OrchestratorService

__all__ = [
    "CacheService", "VideoDownloadService", "GeminiProvider", "RemoteFile",
    "TranscriptionService", "VoiceAnalysisBatcher", "OrchestratorService"
]
