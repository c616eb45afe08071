"""Transcription-related data models."""
from typing import List, Optional

from pydantic import BaseModel, Field


class ScriptComponents(BaseModel):
    """The four labeled script components; each is always present."""
    hook: str = Field("", description="Opening line that grabs attention")
    bridge: str = Field("", description="Transition into the main content")
    nugget: str = Field("", description="Main value or lesson")
    cta: str = Field("", description="Closing call to action")


class ContentMetadata(BaseModel):
    """Best-effort metadata about the transcribed source."""
    platform: str = Field(..., description="Platform inferred from the source URL")
    author: str = "Unknown"
    description: str = "Video transcribed successfully"
    source: Optional[str] = Field(None, description="Original video URL")
    hashtags: List[str] = Field(default_factory=list)


class TranscriptionMetadata(BaseModel):
    """How a transcript was produced."""
    method: str = Field("gemini_file_upload", description="Transcription method")
    processed_at: str = Field(..., description="ISO timestamp of completion")
    file_size: int = Field(..., description="Uploaded byte count")
    mime_type: str
    model: str
    processing_time_ms: Optional[int] = None


class TranscriptionOutcome(BaseModel):
    """Transcript plus its derived components and metadata."""
    transcript: str
    word_count: int = Field(..., description="Whitespace-separated word count")
    character_count: int = Field(..., description="Raw transcript length")
    components: ScriptComponents = Field(default_factory=ScriptComponents)
    content_metadata: ContentMetadata
    visual_context: str = ""
    transcription_metadata: TranscriptionMetadata


class TranscriptionResponse(BaseModel):
    """Structured result of a transcribe-from-url call."""
    success: bool
    transcript: Optional[str] = None
    word_count: Optional[int] = None
    character_count: Optional[int] = None
    components: Optional[ScriptComponents] = None
    content_metadata: Optional[ContentMetadata] = None
    visual_context: Optional[str] = None
    transcription_metadata: Optional[TranscriptionMetadata] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    error_details: Optional[str] = None
    status_code: int = Field(200, description="HTTP status the failure maps to")
    headers_used: List[str] = Field(default_factory=list)
    cookie_names: List[str] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: TranscriptionOutcome, headers_used=None, cookie_names=None) -> "TranscriptionResponse":
        return cls(
            success=True,
            headers_used=headers_used or [],
            cookie_names=cookie_names or [],
            **outcome.model_dump(),
        )
