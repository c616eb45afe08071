"""Gemini file-store and generation calls behind an async interface."""
import asyncio
import io
from typing import Any, Optional

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory
from pydantic import BaseModel

from video_pipeline.core.config import settings
from video_pipeline.core.exceptions import ConfigurationError, ServiceUnavailableError
from video_pipeline.utils.logging import CorrelatedLogger

SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
}


class RemoteFile(BaseModel):
    """Provider-side handle for an uploaded file."""
    name: str
    uri: Optional[str] = None
    mime_type: Optional[str] = None
    state: str = "STATE_UNSPECIFIED"
    error_message: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.state == "ACTIVE" and bool(self.uri)

    @property
    def is_failed(self) -> bool:
        return self.state == "FAILED" or bool(self.error_message)


class GeminiProvider:
    """Thin async wrapper around the google-generativeai SDK; every call runs in a worker thread."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model_name = model_name or settings.gemini_model
        self.logger = CorrelatedLogger(__name__)
        self._configured = False

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _ensure_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY", "Gemini API key not configured")
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True

    async def _call(self, operation: str, func, *args, **kwargs) -> Any:
        self._ensure_configured()
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except Exception as e:
            raise ServiceUnavailableError("gemini", f"{operation} failed: {str(e)}")

    async def upload_file(self, data: bytes, mime_type: str, display_name: str) -> RemoteFile:
        """Upload raw bytes to the provider file store."""
        uploaded = await self._call(
            "upload_file",
            genai.upload_file,
            io.BytesIO(data),
            mime_type=mime_type,
            display_name=display_name,
        )
        return self._to_remote_file(uploaded)

    async def get_file(self, name: str) -> RemoteFile:
        """Fetch the current state of an uploaded file."""
        return self._to_remote_file(await self._call("get_file", genai.get_file, name))

    async def delete_file(self, name: str) -> None:
        await self._call("delete_file", genai.delete_file, name)

    async def generate_from_file(self, remote_file: RemoteFile, prompt: str, model: Optional[str] = None) -> str:
        """Run a prompt against an uploaded file and return the response text."""
        generative_model = genai.GenerativeModel(model or self.model_name, safety_settings=SAFETY_SETTINGS)
        parts = [
            prompt,
            {"file_data": {"file_uri": remote_file.uri, "mime_type": remote_file.mime_type}},
        ]
        response = await self._call("generate_content", generative_model.generate_content, parts)
        return self._response_text(response)

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> str:
        """Run a text-only prompt and return the response text."""
        self._ensure_configured()
        generation_config = genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            response_mime_type="application/json" if json_output else None,
        )
        generative_model = genai.GenerativeModel(
            model or self.model_name,
            safety_settings=SAFETY_SETTINGS,
            system_instruction=system_instruction,
            generation_config=generation_config,
        )
        response = await self._call("generate_content", generative_model.generate_content, prompt)
        return self._response_text(response)

    def _response_text(self, response: Any) -> str:
        try:
            return (response.text or "").strip()
        except ValueError:
            # .text raises when the candidate has no parts (e.g. blocked output)
            self.logger.warning("Gemini response contained no text parts")
            return ""

    @staticmethod
    def _to_remote_file(file: Any) -> RemoteFile:
        state = getattr(file, "state", None)
        error = getattr(file, "error", None)
        return RemoteFile(
            name=file.name,
            uri=getattr(file, "uri", None) or None,
            mime_type=getattr(file, "mime_type", None) or None,
            state=getattr(state, "name", None) or str(state or "STATE_UNSPECIFIED"),
            error_message=getattr(error, "message", None) or None,
        )
