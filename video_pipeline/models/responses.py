"""Response models for the Video Pipeline Service."""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict


class ResponseMetadata(BaseModel):
    """Standard response metadata."""
    request_id: str
    api_version: str = "1.0.0"
    timestamp: Optional[str] = None
    processing_time_ms: Optional[int] = None


class ErrorDetails(BaseModel):
    """Detailed error information; carries whatever context the exception had."""
    model_config = ConfigDict(extra="allow")

    url: Optional[str] = None
    platform: Optional[str] = None
    reason: Optional[str] = None


class ErrorInfo(BaseModel):
    """Error information structure."""
    code: str
    message: str
    details: Optional[ErrorDetails] = None


class SuccessResponse(BaseModel):
    """Standard success response."""
    success: bool = True
    data: Any
    metadata: ResponseMetadata


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: ErrorInfo
    metadata: ResponseMetadata


class PlatformFeatures(BaseModel):
    """Platform feature description."""
    name: str
    domain: str
    supported_features: List[str]
    url_patterns: List[str]


class PipelineLimits(BaseModel):
    """Size and time limits applied by the pipeline."""
    max_download_bytes: int
    transcription_timeout_seconds: float
    voice_analysis_batch_size: int


class SupportedPlatformsData(BaseModel):
    """Supported platforms information."""
    platforms: List[PlatformFeatures]
    limits: PipelineLimits


class DependencyStatus(BaseModel):
    """Service dependency status."""
    yt_dlp: str
    gemini: str
    rapidapi: str
    youtube_data_api: str


class HealthData(BaseModel):
    """Complete health check response."""
    status: str
    timestamp: str
    version: str
    uptime_seconds: int
    dependencies: DependencyStatus
    platform_clients: Dict[str, bool]
