"""Base classes and registries for AI provider backends.

PromptForge talks to two kinds of remote capability:

- **Image generation**: turn a prompt into an image and return a URL the
  image can be downloaded from (:class:`ImageGenerationClient`).
- **Chat completion**: turn an instruction prompt into text, used to enhance
  user prompts (:class:`ChatCompletionClient`).

Each backend (OpenAI, Gemini, ...) subclasses the relevant base class and
registers itself under its provider name.  The configured name is resolved
to a class once, when the application is assembled.

Usage Example
-------------
::

    from promptforge.providers import create_chat_client, create_image_client

    image_client = create_image_client(config)
    url = image_client.generate_image("a lighthouse at dusk", "1024x1024", "hd")

Registering a new backend::

    @image_clients.register
    class MyImageClient(ImageGenerationClient):
        provider_name = "my-provider"

        def generate_image(self, prompt, size, quality):
            ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from promptforge.core.config import PromptForgeConfig
from promptforge.core.errors import UnsupportedProviderOperation

logger = logging.getLogger(__name__)


class ImageGenerationClient(ABC):
    """Abstract base class for image generation backends.

    Attributes
    ----------
    provider_name : str
        Name under which the backend is registered (matches the
        configuration value)
    config : PromptForgeConfig
        Application configuration
    """

    provider_name: str = "base"

    def __init__(self, config: PromptForgeConfig) -> None:
        self.config = config

    @abstractmethod
    def generate_image(self, prompt: str, size: str, quality: str) -> str:
        """Generate one image and return a URL it can be fetched from.

        Args:
            prompt: Text description of the image
            size: Requested size, e.g. ``"1024x1024"``
            quality: Requested quality tier, e.g. ``"standard"``

        Returns
        -------
        str
            URL of the generated image

        Raises
        ------
        GenerationError
            If the remote call fails or returns no image
        UnsupportedProviderOperation
            If the backend does not implement image generation
        """


class ChatCompletionClient(ABC):
    """Abstract base class for chat completion backends."""

    provider_name: str = "base"

    def __init__(self, config: PromptForgeConfig) -> None:
        self.config = config

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Send *prompt* as a single user message and return the reply text.

        Raises
        ------
        CompletionError
            If the remote call fails
        """


ClientT = TypeVar("ClientT", ImageGenerationClient, ChatCompletionClient)


class ProviderRegistry(Generic[ClientT]):
    """Registry mapping provider names to backend classes.

    Args:
        capability: Human-readable name of the capability, used in log and
            error messages (e.g. ``"image generation"``).
    """

    def __init__(self, capability: str) -> None:
        self.capability = capability
        self._clients: dict[str, type[ClientT]] = {}

    def register(self, client_class: type[ClientT]) -> type[ClientT]:
        """Register a backend class.  Usable as a class decorator."""
        name = client_class.provider_name

        if name in self._clients:
            logger.warning(f"{self.capability} provider '{name}' is already registered, overwriting")

        self._clients[name] = client_class
        logger.debug(f"Registered {self.capability} provider: {name}")
        return client_class

    def create(self, name: str, config: PromptForgeConfig) -> ClientT:
        """Instantiate the backend registered under *name*.

        Raises
        ------
        UnsupportedProviderOperation
            If no backend is registered under *name*
        """
        client_class = self._clients.get(name.lower())
        if client_class is None:
            available = ", ".join(self.list_available()) or "none"
            raise UnsupportedProviderOperation(
                f"Unsupported {self.capability} provider: {name}. Available: {available}",
                name,
            )

        logger.info(f"Using {name} for {self.capability}")
        return client_class(config)

    def list_available(self) -> list[str]:
        return list(self._clients.keys())


image_clients: ProviderRegistry[ImageGenerationClient] = ProviderRegistry("image generation")
chat_clients: ProviderRegistry[ChatCompletionClient] = ProviderRegistry("chat completion")
