"""Configuration management for PromptForge.

This module provides configuration management using Pydantic Settings.
Values are loaded from environment variables with the ``PROMPTFORGE_``
prefix, allowing easy customization without code changes.  The API keys and
the provider selection also accept their conventional unprefixed names
(``OPENAI_API_KEY``, ``GEMINI_API_KEY``, ``PROVIDER``).

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:

1. Keyword arguments passed to :class:`PromptForgeConfig`
2. Environment variables (``PROMPTFORGE_*`` prefix)
3. ``.env`` file in the working directory
4. Default values defined in :class:`PromptForgeConfig`

Example .env file::

    PROMPTFORGE_PROVIDER=openai
    OPENAI_API_KEY=sk-...
    PROMPTFORGE_OPENAI_MODEL=gpt-4o-mini
    PROMPTFORGE_STORAGE_DIR=generated-images
    PROMPTFORGE_SERVER_PORT=3000

Provider Selection
------------------
A single ``provider`` value selects the backend for both prompt enhancement
and image generation.  ``llm_provider`` and ``image_provider`` override it
independently, e.g. Gemini for enhancement and OpenAI for images.  The key of
every selected backend must be present, otherwise construction fails with a
validation error.

Usage
-----
There is no global instance.  Build the configuration once at process start
and pass it to the components that need it::

    from promptforge.core.config import PromptForgeConfig
    from promptforge.api.main import create_app

    config = PromptForgeConfig()
    app = create_app(config)

The object is frozen: to change a value, set the environment variable and
restart the application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ProviderName = Literal["openai", "gemini"]

DEFAULT_GEMINI_TEXT_MODEL = "gemini-2.0-flash"


class PromptForgeConfig(BaseSettings):
    """Main configuration for PromptForge.

    Attributes
    ----------
    Provider Settings:
        provider : Literal["openai", "gemini"]
            Backend used for both enhancement and image generation
        llm_provider : Literal["openai", "gemini"] | None
            Optional override of ``provider`` for prompt enhancement
        image_provider : Literal["openai", "gemini"] | None
            Optional override of ``provider`` for image generation

    Credentials:
        openai_api_key : str | None
            OpenAI API key (required when an OpenAI backend is selected)
        gemini_api_key : str | None
            Gemini API key (required when a Gemini backend is selected)

    Model Settings:
        openai_model, openai_temperature
            Chat model used to enhance prompts through OpenAI
        openai_image_model
            Image model used for generation through OpenAI
        gemini_model, gemini_temperature
            Text model used to enhance prompts through Gemini

    Server Settings:
        server_host, server_port, environment

    Storage Settings:
        storage_dir : Path
            Flat directory holding one ``<id>.png`` and ``<id>.json`` per image
        download_max_redirects : int
            Maximum redirects followed when fetching a generated image
        download_timeout : float
            Timeout in seconds for the image download

    Examples
    --------
    Create a custom configuration:

        >>> cfg = PromptForgeConfig(
        ...     provider="openai",
        ...     openai_api_key="sk-test",
        ...     storage_dir="/tmp/images",
        ... )
        >>> cfg.image_backend
        'openai'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROMPTFORGE_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Provider selection
    provider: ProviderName = Field(
        default="openai",
        validation_alias=AliasChoices("provider", "PROMPTFORGE_PROVIDER", "PROVIDER"),
        description="Backend for both prompt enhancement and image generation",
    )
    llm_provider: ProviderName | None = Field(
        default=None,
        description="Override of provider for prompt enhancement",
    )
    image_provider: ProviderName | None = Field(
        default=None,
        description="Override of provider for image generation",
    )

    # Credentials
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "openai_api_key", "PROMPTFORGE_OPENAI_API_KEY", "OPENAI_API_KEY"
        ),
    )
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "gemini_api_key", "PROMPTFORGE_GEMINI_API_KEY", "GEMINI_API_KEY"
        ),
    )

    # OpenAI models
    openai_model: str = Field(default="gpt-3.5-turbo")
    openai_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    openai_image_model: str = Field(default="dall-e-3")

    # Gemini models
    gemini_model: str = Field(default=DEFAULT_GEMINI_TEXT_MODEL)
    gemini_temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(default=3000, ge=1024, le=65535)
    environment: Literal["development", "production", "test"] = Field(default="development")

    # Storage
    storage_dir: Path = Field(
        default=Path("generated-images"),
        description="Directory holding generated images and their metadata",
    )
    download_max_redirects: int = Field(default=5, ge=0, le=20)
    download_timeout: float = Field(default=60.0, gt=0)

    @model_validator(mode="after")
    def _check_credentials(self) -> PromptForgeConfig:
        """Fail fast when a selected backend has no API key."""
        selected = {self.enhancer_backend, self.image_backend}
        if "openai" in selected and not self.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required when the openai provider is selected")
        if "gemini" in selected and not self.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required when the gemini provider is selected")
        return self

    @property
    def enhancer_backend(self) -> ProviderName:
        return self.llm_provider or self.provider

    @property
    def image_backend(self) -> ProviderName:
        return self.image_provider or self.provider

    @property
    def gemini_text_model(self) -> str:
        """Gemini model used for text completion.

        Image-generation models cannot answer a text prompt, so a configured
        ``*image*`` model falls back to the default text model.
        """
        if "image" in self.gemini_model.lower():
            return DEFAULT_GEMINI_TEXT_MODEL
        return self.gemini_model

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
