"""AI provider backends for PromptForge.

Importing this package registers every built-in backend with
:data:`image_clients` and :data:`chat_clients`.
"""

from promptforge.core.config import PromptForgeConfig

from .base import (
    ChatCompletionClient,
    ImageGenerationClient,
    ProviderRegistry,
    chat_clients,
    image_clients,
)

# Import backends to ensure they're registered
from .gemini_provider import GeminiChatClient, GeminiImageClient  # noqa: F401
from .openai_provider import OpenAIChatClient, OpenAIImageClient  # noqa: F401


def create_image_client(config: PromptForgeConfig) -> ImageGenerationClient:
    """Instantiate the image generation backend selected by *config*."""
    return image_clients.create(config.image_backend, config)


def create_chat_client(config: PromptForgeConfig) -> ChatCompletionClient:
    """Instantiate the chat completion backend selected by *config*."""
    return chat_clients.create(config.enhancer_backend, config)


__all__ = [
    "ChatCompletionClient",
    "ImageGenerationClient",
    "ProviderRegistry",
    "chat_clients",
    "image_clients",
    "create_chat_client",
    "create_image_client",
    "GeminiChatClient",
    "GeminiImageClient",
    "OpenAIChatClient",
    "OpenAIImageClient",
]
