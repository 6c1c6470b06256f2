"""Google Gemini backends.

Gemini is supported for prompt enhancement.  Image generation through Gemini
is not implemented: the client can be selected and constructed, but every
generation request fails immediately with
:class:`~promptforge.core.errors.UnsupportedProviderOperation`.
"""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from promptforge.core.config import PromptForgeConfig
from promptforge.core.errors import CompletionError, UnsupportedProviderOperation

from .base import ChatCompletionClient, ImageGenerationClient, chat_clients, image_clients

logger = logging.getLogger(__name__)


@chat_clients.register
class GeminiChatClient(ChatCompletionClient):
    """Complete prompts with the Gemini ``generate_content`` API."""

    provider_name = "gemini"

    def __init__(self, config: PromptForgeConfig, client: Any | None = None) -> None:
        super().__init__(config)
        self.model = config.gemini_text_model
        self.temperature = config.gemini_temperature
        self._client = client or genai.Client(api_key=config.gemini_api_key)

    def complete(self, prompt: str) -> str:
        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(temperature=self.temperature),
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini completion error: {e}")
            raise CompletionError(f"Gemini API error: {e}", self.provider_name) from e

        return response.text or ""


@image_clients.register
class GeminiImageClient(ImageGenerationClient):
    """Placeholder for Gemini image generation."""

    provider_name = "gemini"

    def __init__(self, config: PromptForgeConfig) -> None:
        super().__init__(config)
        if not config.gemini_api_key:
            raise UnsupportedProviderOperation(
                "Gemini API key is required for image generation", self.provider_name
            )

    def generate_image(self, prompt: str, size: str, quality: str) -> str:
        raise UnsupportedProviderOperation(
            "Image generation is not implemented for the gemini provider", self.provider_name
        )
