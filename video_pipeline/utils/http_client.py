"""Thin aiohttp transport shared by the platform clients, downloader and orchestrator."""
import asyncio
import json
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import aiohttp

from ..core.config import settings
from ..core.exceptions import ServiceUnavailableError, TimeoutError


class HttpResponse:
    """Fully-read HTTP response."""

    def __init__(self, status: int, reason: str = "", headers: Optional[Dict[str, str]] = None, body: bytes = b""):
        self.status = status
        self.reason = reason or ""
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.body = body or b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON; raises ValueError on malformed content."""
        return json.loads(self.text())

    def json_or_none(self) -> Any:
        try:
            return self.json()
        except ValueError:
            return None

    def __repr__(self) -> str:
        return f"HttpResponse(status={self.status}, size={len(self.body)})"


class HttpClient:
    """Async HTTP transport; one aiohttp session per request."""

    def __init__(self, timeout_seconds: Optional[float] = None):
        self.timeout_seconds = timeout_seconds or settings.http_timeout

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        read_body: bool = True,
    ) -> HttpResponse:
        """Send a request and read the whole body (skipped for HEAD)."""
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    json=json_body,
                    allow_redirects=True,
                ) as response:
                    body = await response.read() if read_body and method.upper() != "HEAD" else b""
                    return HttpResponse(
                        status=response.status,
                        reason=response.reason or "",
                        headers=dict(response.headers),
                        body=body,
                    )
        except asyncio.TimeoutError:
            raise TimeoutError(f"{method.upper()} {urlparse(url).netloc}", self.timeout_seconds)
        except aiohttp.ClientError as e:
            raise ServiceUnavailableError(urlparse(url).netloc or url, str(e))

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None,
                  params: Optional[Dict[str, Any]] = None) -> HttpResponse:
        return await self.request("GET", url, headers=headers, params=params)

    async def head(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return await self.request("HEAD", url, headers=headers, read_body=False)

    async def post_json(self, url: str, payload: Any,
                        headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return await self.request("POST", url, headers=headers, json_body=payload)
