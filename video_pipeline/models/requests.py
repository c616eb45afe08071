"""Request models for the Video Pipeline Service."""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class PlatformUrlRequest(BaseModel):
    """Request model for URL validation and content lookup."""
    url: str


class TranscribeFromUrlRequest(BaseModel):
    """Request model for transcribing a direct media URL."""
    model_config = ConfigDict(populate_by_name=True)

    video_url: Optional[str] = Field(None, alias="videoUrl")
    cookies: Optional[Any] = Field(None, description="Cookie header string, list of {name, value} or a mapping")


class AnalyzeBatchRequest(BaseModel):
    """Request model for batched voice analysis."""
    model_config = ConfigDict(populate_by_name=True)

    transcripts: List[str] = Field(default_factory=list)
    creator: Optional[Dict[str, Any]] = None
    batch_size: Optional[int] = Field(None, alias="batchSize", gt=0)
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = Field(None, alias="maxTokens", gt=0)
