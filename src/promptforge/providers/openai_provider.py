"""OpenAI backends for image generation and prompt enhancement."""

from __future__ import annotations

import logging

import openai
from openai import OpenAI

from promptforge.core.config import PromptForgeConfig
from promptforge.core.errors import CompletionError, GenerationError

from .base import ChatCompletionClient, ImageGenerationClient, chat_clients, image_clients

logger = logging.getLogger(__name__)


def _describe_error(error: openai.OpenAIError) -> str:
    if isinstance(error, openai.AuthenticationError):
        return f"OpenAI authentication failed: {error}"
    if isinstance(error, openai.RateLimitError):
        return f"OpenAI rate limit exceeded: {error}"
    return f"OpenAI API error: {error}"


@image_clients.register
class OpenAIImageClient(ImageGenerationClient):
    """Generate images with the OpenAI Images API (DALL-E)."""

    provider_name = "openai"

    def __init__(self, config: PromptForgeConfig, client: OpenAI | None = None) -> None:
        super().__init__(config)
        self.model = config.openai_image_model
        self._client = client or OpenAI(api_key=config.openai_api_key)

    def generate_image(self, prompt: str, size: str, quality: str) -> str:
        try:
            response = self._client.images.generate(
                model=self.model,
                prompt=prompt,
                n=1,
                size=size,
                quality=quality,
                response_format="url",
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI image generation error: {e}")
            raise GenerationError(
                f"Failed to generate image: {_describe_error(e)}", self.provider_name
            ) from e

        data = response.data or []
        image_url = data[0].url if data else None
        if not image_url:
            raise GenerationError("No image URL returned from OpenAI", self.provider_name)

        return image_url


@chat_clients.register
class OpenAIChatClient(ChatCompletionClient):
    """Complete prompts with the OpenAI Chat Completions API."""

    provider_name = "openai"

    def __init__(self, config: PromptForgeConfig, client: OpenAI | None = None) -> None:
        super().__init__(config)
        self.model = config.openai_model
        self.temperature = config.openai_temperature
        self._client = client or OpenAI(api_key=config.openai_api_key)

    def complete(self, prompt: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            raise CompletionError(_describe_error(e), self.provider_name) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
