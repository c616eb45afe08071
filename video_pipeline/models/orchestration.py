"""Orchestration request and report models. JSON keys are camelCase."""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.config import settings


class OrchestrateRequest(BaseModel):
    """How to fetch candidate videos and what to do with them."""
    model_config = ConfigDict(populate_by_name=True)

    fetch_endpoint: str = Field("/api/tiktok/user-feed", alias="fetchEndpoint")
    fetch_payload: Dict[str, Any] = Field(default_factory=dict, alias="fetchPayload")
    fetch_limit: int = Field(default_factory=lambda: settings.orchestrator_fetch_limit, alias="fetchLimit")
    transcribe_endpoint: str = Field("/api/video/transcribe-from-url", alias="transcribeEndpoint")
    enable_voice_analysis: bool = Field(False, alias="enableVoiceAnalysis")
    voice_analysis_batch_size: int = Field(
        default_factory=lambda: settings.voice_analysis_batch_size, alias="voiceAnalysisBatchSize"
    )
    creator_info: Dict[str, Any] = Field(default_factory=dict, alias="creatorInfo")


class FetchSummary(BaseModel):
    """What the fetch stage returned."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    endpoint: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    total_videos: int = Field(..., alias="totalVideos")
    processed: int


class TranscriptionAttempt(BaseModel):
    """Outcome of transcribing one candidate video."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    success: bool
    video_url: Optional[str] = Field(None, alias="videoUrl")
    transcript_length: Optional[int] = Field(None, alias="transcriptLength")
    details: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    status: Optional[int] = None
    response: Optional[Any] = None

    @property
    def transcript(self) -> Optional[str]:
        if not self.success or not self.details:
            return None
        value = self.details.get("transcript")
        return value if isinstance(value, str) and value.strip() else None


class OrchestrationSummary(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success_count: int = Field(..., alias="successCount")
    failure_count: int = Field(..., alias="failureCount")


class VoiceAnalysisOutcome(BaseModel):
    """Result of the optional voice analysis stage."""
    model_config = ConfigDict(frozen=True)

    status: Literal["not_attempted", "completed", "failed"]
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class OrchestrationReport(BaseModel):
    """Aggregate report for one orchestration call."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success: bool = True
    request_id: str = Field(..., alias="requestId")
    duration_ms: int = Field(..., alias="durationMs")
    fetch: FetchSummary
    transcriptions: List[TranscriptionAttempt] = Field(default_factory=list)
    summary: OrchestrationSummary
    voice_analysis: VoiceAnalysisOutcome = Field(..., alias="voiceAnalysis")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
