"""
Configuration management for the Video Pipeline Service.
Centralizes environment variable handling and application settings.
"""
import os
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _positive_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to default."""
    try:
        value = int(os.getenv(name, ""))
    except ValueError:
        return default
    return value if value > 0 else default


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        # API Configuration
        self.api_title = "Video Pipeline Service"
        self.api_description = (
            "Resolves TikTok, Instagram and YouTube content, downloads and transcribes "
            "videos with Gemini, and batches transcripts into voice analyses"
        )
        self.api_version = "1.0.0"
        self.debug_mode = os.getenv("DEBUG_MODE", "false").lower() == "true"
        self.allowed_origins = ["*"]

        # External API Keys
        self.rapidapi_key = os.getenv("RAPIDAPI_KEY", "")
        self.youtube_api_key = os.getenv("YOUTUBE_API_KEY", "")
        self.gemini_api_key = os.getenv("GEMINI_API_KEY", "")
        self.gemini_model = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

        # Downloads
        self.max_download_bytes = _positive_int("VIDEO_TRANSCRIBE_MAX_BYTES", 80 * 1024 * 1024)
        self.download_max_attempts = int(os.getenv("DOWNLOAD_MAX_ATTEMPTS", "4"))
        self.download_backoff_base = float(os.getenv("DOWNLOAD_BACKOFF_BASE_SECONDS", "0.5"))
        self.download_backoff_cap = float(os.getenv("DOWNLOAD_BACKOFF_CAP_SECONDS", "4.0"))
        self.download_backoff_jitter = float(os.getenv("DOWNLOAD_BACKOFF_JITTER_SECONDS", "0.25"))

        # Transcription
        self.file_poll_interval = float(os.getenv("FILE_POLL_INTERVAL_SECONDS", "1.0"))
        self.file_poll_max_attempts = int(os.getenv("FILE_POLL_MAX_ATTEMPTS", "10"))
        self.transcription_timeout = float(os.getenv("TRANSCRIPTION_TIMEOUT_SECONDS", "120"))
        self.component_analysis_timeout = float(os.getenv("COMPONENT_ANALYSIS_TIMEOUT_SECONDS", "60"))

        # Cache Configuration
        self.content_cache_ttl_seconds = int(os.getenv("CONTENT_CACHE_TTL_SECONDS", str(24 * 60 * 60)))

        # HTTP
        self.http_timeout = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

        # Orchestration
        self.orchestrator_base_url = os.getenv("ORCHESTRATOR_BASE_URL", "http://localhost:8000")
        self.orchestrator_fetch_limit = int(os.getenv("ORCHESTRATOR_FETCH_LIMIT", "5"))

        # Voice analysis
        self.voice_analysis_batch_size = int(os.getenv("VOICE_ANALYSIS_BATCH_SIZE", "10"))
        self.voice_analysis_temperature = float(os.getenv("VOICE_ANALYSIS_TEMPERATURE", "0.2"))
        self.voice_analysis_max_tokens = int(os.getenv("VOICE_ANALYSIS_MAX_TOKENS", "6000"))

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_format = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")


class PlatformConfig:
    """Platform-specific configurations."""

    SUPPORTED_PLATFORMS = {
        "tiktok": {
            "domains": ["tiktok.com", "www.tiktok.com", "vm.tiktok.com", "vt.tiktok.com", "m.tiktok.com"],
            "features": ["metadata_extraction", "video_download", "engagement_metrics"],
            "url_patterns": [
                "https://www.tiktok.com/@{username}/video/{video_id}",
                "https://vm.tiktok.com/{short_id}",
                "https://vt.tiktok.com/{short_id}",
                "https://www.tiktok.com/t/{short_id}",
            ],
            "cdn_markers": ["tiktokcdn", "tiktokv.com", "muscdn.com"],
        },
        "instagram": {
            "domains": ["instagram.com", "www.instagram.com"],
            "features": ["metadata_extraction", "video_download", "engagement_metrics"],
            "url_patterns": [
                "https://www.instagram.com/reel/{shortcode}/",
                "https://www.instagram.com/p/{shortcode}/",
                "https://www.instagram.com/tv/{shortcode}/",
            ],
            "cdn_markers": ["cdninstagram.com", "fbcdn.net"],
        },
        "youtube": {
            "domains": ["youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be"],
            "features": ["metadata_extraction", "engagement_metrics", "captions"],
            "url_patterns": [
                "https://www.youtube.com/watch?v={video_id}",
                "https://youtu.be/{video_id}",
                "https://www.youtube.com/shorts/{video_id}",
            ],
            "cdn_markers": ["googlevideo.com"],
        },
    }

    @classmethod
    def get_platform_domains(cls, platform: str) -> List[str]:
        """Get supported domains for a platform."""
        return cls.SUPPORTED_PLATFORMS.get(platform, {}).get("domains", [])

    @classmethod
    def get_platform_features(cls, platform: str) -> List[str]:
        """Get supported features for a platform."""
        return cls.SUPPORTED_PLATFORMS.get(platform, {}).get("features", [])

    @classmethod
    def platform_for_host(cls, host: str) -> Optional[str]:
        """Map a hostname (site or CDN) to a platform name."""
        host = (host or "").lower()
        for platform, config in cls.SUPPORTED_PLATFORMS.items():
            if any(host == d or host.endswith("." + d) for d in config["domains"]):
                return platform
            if any(marker in host for marker in config.get("cdn_markers", [])):
                return platform
        return None


class YTDLPConfig:
    """Configuration for yt-dlp caption lookups."""

    BASE_OPTIONS = {
        'quiet': True,
        'no_warnings': True,
        'writesubtitles': True,
        'writeautomaticsub': True,
        'skip_download': True,
        'extract_flat': False,
        'socket_timeout': 30,
        'retries': 2,
        'http_headers': {
            'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0 Safari/537.36'
        },
    }

    @classmethod
    def get_options(cls, timeout: int = 30, retries: int = 2) -> dict:
        """Get yt-dlp options with custom timeout and retries."""
        options = cls.BASE_OPTIONS.copy()
        options.update({
            'socket_timeout': timeout,
            'retries': retries
        })
        return options


# Create global settings instance
settings = Settings()
