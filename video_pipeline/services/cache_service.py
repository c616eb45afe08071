"""Short-lived in-memory cache for platform content records."""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from video_pipeline.core.config import settings


class CacheService:
    """In-memory cache keyed by (platform, content_id) with per-entry expiry."""

    def __init__(self, default_ttl_seconds: Optional[int] = None):
        self._cache: Dict[str, Dict[str, Any]] = {}
        self.default_ttl_seconds = default_ttl_seconds or settings.content_cache_ttl_seconds
        self.hits = 0
        self.misses = 0

    def _make_key(self, platform: str, content_id: str) -> str:
        """Generate cache key from platform and content id."""
        return f"{platform}:{content_id}"

    def _live_item(self, key: str) -> Optional[Dict[str, Any]]:
        item = self._cache.get(key)
        if item is None:
            return None

        # Check if expired
        if datetime.now() > item['expires_at']:
            del self._cache[key]
            return None

        return item

    def get(self, platform: str, content_id: str) -> Optional[Any]:
        """Get cached data, or None when absent or expired."""
        item = self._live_item(self._make_key(platform, content_id))
        if item is None:
            self.misses += 1
            return None
        self.hits += 1
        return item['data']

    def set(self, platform: str, content_id: str, data: Any, ttl_seconds: Optional[int] = None) -> None:
        """Cache data for one content id."""
        ttl = ttl_seconds or self.default_ttl_seconds
        now = datetime.now()

        self._cache[self._make_key(platform, content_id)] = {
            'data': data,
            'expires_at': now + timedelta(seconds=ttl),
            'created_at': now
        }

    def exists(self, platform: str, content_id: str) -> bool:
        """Check if a live entry exists."""
        return self._live_item(self._make_key(platform, content_id)) is not None

    def clear(self) -> None:
        """Clear all cache."""
        self._cache.clear()
        self.hits = 0
        self.misses = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache stats."""
        lookups = self.hits + self.misses
        return {
            "total_items": len(self._cache),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / lookups if lookups else 0.0,
        }
