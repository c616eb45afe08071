"""Platform clients and the URL-routing manager."""
from .base import BasePlatformClient
from .tiktok import TikTokClient
from .instagram import InstagramClient
from .youtube import YouTubeClient
from .manager import PlatformDetection, PlatformServiceManager

__all__ = [
    "BasePlatformClient", "TikTokClient", "InstagramClient", "YouTubeClient",
    "PlatformDetection", "PlatformServiceManager"
]
