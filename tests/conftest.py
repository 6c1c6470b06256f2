"""Shared pytest fixtures for PromptForge tests."""

from __future__ import annotations

import io
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from promptforge.api.main import create_app
from promptforge.core.config import PromptForgeConfig
from promptforge.core.enhancer import PromptEnhancer
from promptforge.core.pipeline import GenerationPipeline
from promptforge.core.store import ImageStore
from promptforge.providers.base import ChatCompletionClient, ImageGenerationClient

GENERATED_URL = "https://images.example.com/generated.png"

_ENV_VARS = (
    "PROVIDER",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "PROMPTFORGE_PROVIDER",
    "PROMPTFORGE_LLM_PROVIDER",
    "PROMPTFORGE_IMAGE_PROVIDER",
    "PROMPTFORGE_OPENAI_API_KEY",
    "PROMPTFORGE_GEMINI_API_KEY",
    "PROMPTFORGE_SERVER_PORT",
    "PROMPTFORGE_STORAGE_DIR",
)


class FakeChatClient(ChatCompletionClient):
    """Chat client returning a canned reply or raising a canned error."""

    provider_name = "fake"

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.config = None
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeImageClient(ImageGenerationClient):
    """Image client returning a fixed URL and recording its calls."""

    provider_name = "fake"

    def __init__(self, url: str = GENERATED_URL, error: Exception | None = None) -> None:
        self.config = None
        self.url = url
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    def generate_image(self, prompt: str, size: str, quality: str) -> str:
        self.calls.append((prompt, size, quality))
        if self.error is not None:
            raise self.error
        return self.url


def make_png(color: tuple[int, int, int] = (255, 0, 0), image_format: str = "PNG") -> bytes:
    """Encode a small solid-colour image."""
    buffer = io.BytesIO()
    Image.new("RGB", (16, 16), color=color).save(buffer, format=image_format)
    return buffer.getvalue()


def make_store(storage_dir: Path, handler, max_redirects: int = 5) -> ImageStore:
    """Create an ImageStore whose downloads are served by *handler*."""
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ImageStore(storage_dir, http_client=client, max_redirects=max_redirects)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    """Keep the developer's environment out of configuration tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> PromptForgeConfig:
    """Create an OpenAI test configuration storing images in a temp dir."""
    return PromptForgeConfig(
        _env_file=None,
        provider="openai",
        openai_api_key="sk-test",
        storage_dir=str(temp_dir / "images"),
        environment="test",
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def image_store(temp_dir: Path, png_bytes: bytes) -> ImageStore:
    """Store whose downloads return ``png_bytes`` for ``GENERATED_URL``."""

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == GENERATED_URL:
            return httpx.Response(200, content=png_bytes, headers={"content-type": "image/png"})
        return httpx.Response(404)

    return make_store(temp_dir / "images", handler)


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient(reply="a cat, painted in watercolor, soft lighting")


@pytest.fixture
def image_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def pipeline(
    chat_client: FakeChatClient,
    image_client: FakeImageClient,
    image_store: ImageStore,
) -> GenerationPipeline:
    return GenerationPipeline(PromptEnhancer(chat_client), image_client, image_store)


@pytest.fixture
def test_client(pipeline: GenerationPipeline) -> TestClient:
    """FastAPI TestClient backed by fake providers and a temp-dir store."""
    return TestClient(create_app(pipeline=pipeline))


@pytest.fixture
def store_factory(temp_dir: Path):
    """Return a function building a store whose downloads use a handler."""

    def factory(handler, max_redirects: int = 5) -> ImageStore:
        return make_store(temp_dir / "images", handler, max_redirects=max_redirects)

    return factory


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_png(color=(0, 0, 255), image_format="JPEG")
