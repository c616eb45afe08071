"""Platform content data models."""
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Platform(str, Enum):
    """Supported social platforms."""
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"


class EngagementMetrics(BaseModel):
    """Engagement counters; absent values are reported as zero."""
    likes: int = 0
    views: int = 0
    comments: int = 0
    shares: int = 0
    saves: int = 0


class ContentRecord(BaseModel):
    """Normalized cross-platform video/post metadata."""
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str = Field(..., description="Platform content id")
    platform: Platform = Field(..., description="Platform the content belongs to")
    short_code: Optional[str] = Field(None, description="Shortcode or short-link code, when the platform has one")
    title: str = ""
    description: str = ""
    author: str = Field("", description="Author handle")
    author_display_name: str = ""
    author_verified: bool = False
    video_url: Optional[str] = Field(None, description="Direct media URL")
    audio_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: float = Field(0, description="Duration in seconds")
    hashtags: List[str] = Field(default_factory=list)
    mentions: List[str] = Field(default_factory=list)
    metrics: EngagementMetrics = Field(default_factory=EngagementMetrics)
    timestamp: Optional[str] = Field(None, description="Publish time, ISO 8601")
    is_video: bool = True
    language: Optional[str] = None
    raw_data: Any = Field(None, description="Provider payload, kept for auditability")

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("content id must not be empty")
        return value


class DownloadResult(BaseModel):
    """Binary payload fetched from a direct media URL."""
    data: bytes = Field(..., description="Downloaded bytes")
    size: int = Field(..., description="Byte size of data")
    mime_type: str = "video/mp4"
    filename: str = "video.mp4"
    quality: str = "default"
    source_url: Optional[str] = None
    headers_used: List[str] = Field(default_factory=list, description="Request header names sent")
    cookie_names: List[str] = Field(default_factory=list, description="Cookie names sent, never values")


class TranscriptSegment(BaseModel):
    """One caption line with timing."""
    text: str
    start: float = Field(0.0, description="Start time in seconds")
    duration: float = Field(0.0, description="Duration in seconds")


class UrlValidationResult(BaseModel):
    """Outcome of checking a URL against the registered platforms."""
    valid: bool
    platform: Optional[Platform] = None
    error: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)
