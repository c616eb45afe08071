"""Data models for the Video Pipeline Service."""
from .content import (
    Platform, EngagementMetrics, ContentRecord, DownloadResult,
    TranscriptSegment, UrlValidationResult
)
from .transcription import (
    ScriptComponents, ContentMetadata, TranscriptionMetadata,
    TranscriptionOutcome, TranscriptionResponse
)
from .analysis import (
    TemplateItem, TemplateSet, StyleSignature, CombinedAnalysis,
    BatchAnalysisMeta, BatchAnalysisResponse
)
from .orchestration import (
    OrchestrateRequest, FetchSummary, TranscriptionAttempt,
    OrchestrationSummary, VoiceAnalysisOutcome, OrchestrationReport
)
from .requests import PlatformUrlRequest, TranscribeFromUrlRequest, AnalyzeBatchRequest
from .responses import (
    ResponseMetadata, ErrorDetails, ErrorInfo, SuccessResponse, ErrorResponse,
    PlatformFeatures, PipelineLimits, SupportedPlatformsData,
    DependencyStatus, HealthData
)

__all__ = [
    "Platform", "EngagementMetrics", "ContentRecord", "DownloadResult",
    "TranscriptSegment", "UrlValidationResult",
    "ScriptComponents", "ContentMetadata", "TranscriptionMetadata",
    "TranscriptionOutcome", "TranscriptionResponse",
    "TemplateItem", "TemplateSet", "StyleSignature", "CombinedAnalysis",
    "BatchAnalysisMeta", "BatchAnalysisResponse",
    "OrchestrateRequest", "FetchSummary", "TranscriptionAttempt",
    "OrchestrationSummary", "VoiceAnalysisOutcome", "OrchestrationReport",
    "PlatformUrlRequest", "TranscribeFromUrlRequest", "AnalyzeBatchRequest",
    "ResponseMetadata", "ErrorDetails", "ErrorInfo", "SuccessResponse", "ErrorResponse",
    "PlatformFeatures", "PipelineLimits", "SupportedPlatformsData",
    "DependencyStatus", "HealthData",
]
