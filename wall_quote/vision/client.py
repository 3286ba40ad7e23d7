import logging
from typing import Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from wall_quote.core.config import Settings
from wall_quote.core.errors import UpstreamError
from wall_quote.core.retry import RetryPolicy, retry_on

logger = logging.getLogger(__name__)


class VisionClient(Protocol):
    def generate(self, prompt: str, image: bytes, mime_type: str) -> str:
        """Send one image plus instructions, return the model's text reply."""
        ...


def is_transient(exc: Exception) -> bool:
    return isinstance(exc, (httpx.TransportError, genai_errors.ServerError))


class GeminiVisionClient:
    """Gemini on Vertex AI through the ``google-genai`` SDK."""

    def __init__(self, client: genai.Client, model: str, retry: RetryPolicy):
        self.client = client
        self.model = model
        self.retry = retry

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiVisionClient":
        client = genai.Client(
            vertexai=True,
            project=settings.google_project_id,
            location=settings.google_location,
            http_options=types.HttpOptions(timeout=int(settings.remote_timeout_seconds * 1000)),
        )
        retry = RetryPolicy(
            attempts=settings.remote_retry_attempts,
            base=settings.remote_retry_base_seconds,
        )
        return cls(client=client, model=settings.vision_model, retry=retry)

    def generate(self, prompt: str, image: bytes, mime_type: str) -> str:
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=prompt),
                    types.Part.from_bytes(data=image, mime_type=mime_type),
                ],
            )
        ]

        def _call():
            return self.client.models.generate_content(model=self.model, contents=contents)

        try:
            response = retry_on(_call, self.retry, is_retryable=is_transient)
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error("vision model call failed: %r", e)
            raise UpstreamError(f"Vision model request failed: {e}") from e

        return response.text or ""
