"""Tests for promptforge.core.pipeline — the generation pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from promptforge.core.enhancer import PromptEnhancer
from promptforge.core.errors import (
    DownloadError,
    GenerationError,
    ImageNotFoundError,
    UnsupportedProviderOperation,
)
from promptforge.core.models import GenerationRequest, ImageRecord
from promptforge.core.pipeline import GenerationPipeline, download_filename


def _record(image_id: str = "abc123", prompt: str = "a cat") -> ImageRecord:
    return ImageRecord(id=image_id, prompt=prompt, created_at=datetime.now(timezone.utc))


class TestGenerate:
    """End-to-end generation with fake providers and a temp-dir store."""

    def test_generate_stores_original_prompt(self, pipeline, image_client, image_store):
        result = pipeline.generate(GenerationRequest(prompt="a cat"))

        assert result.prompt == "a cat"
        assert result.url == f"/api/images/{result.image_id}"
        assert image_store.exists(result.image_id)

        record = image_store.find_by_id(result.image_id)
        assert record.prompt == "a cat"
        assert record.size == "1024x1024"
        assert record.quality == "standard"

    def test_enhanced_prompt_sent_to_image_backend(self, pipeline, image_client):
        pipeline.generate(GenerationRequest(prompt="a cat", size="1024x1792", quality="hd"))

        assert image_client.calls == [
            ("a cat, painted in watercolor, soft lighting", "1024x1792", "hd")
        ]

    def test_failed_enhancement_uses_original(self, pipeline, chat_client, image_client):
        chat_client.error = RuntimeError("timeout")

        result = pipeline.generate(GenerationRequest(prompt="a cat"))

        assert image_client.calls[0][0] == "a cat"
        assert result.prompt == "a cat"

    def test_generation_error_propagates(self, pipeline, image_client, image_store):
        image_client.error = GenerationError("Failed to generate image: boom", "openai")

        with pytest.raises(GenerationError):
            pipeline.generate(GenerationRequest(prompt="a cat"))
        assert image_store.find_all() == []

    def test_unsupported_backend_propagates(self, pipeline, image_client, image_store):
        image_client.error = UnsupportedProviderOperation("not implemented", "gemini")

        with pytest.raises(UnsupportedProviderOperation):
            pipeline.generate(GenerationRequest(prompt="a cat"))
        assert image_store.find_all() == []

    def test_empty_url(self, pipeline, image_client, image_store):
        image_client.url = ""

        with pytest.raises(GenerationError, match="returned no URL"):
            pipeline.generate(GenerationRequest(prompt="a cat"))
        assert image_store.find_all() == []

    def test_download_failure_propagates(self, pipeline, image_client, image_store):
        image_client.url = "https://images.example.com/missing.png"

        with pytest.raises(DownloadError):
            pipeline.generate(GenerationRequest(prompt="a cat"))
        assert image_store.find_all() == []


class TestResolveImage:
    """Read-side lookups used by the HTTP layer."""

    def test_resolve_existing(self, pipeline, image_store):
        result = pipeline.generate(GenerationRequest(prompt="a cat"))

        record, path = pipeline.resolve_image(result.image_id)

        assert record.id == result.image_id
        assert path == image_store.path_for(result.image_id)

    def test_unknown_id(self, pipeline):
        with pytest.raises(ImageNotFoundError, match="Image not found"):
            pipeline.resolve_image("doesnotexist")

    def test_record_without_image(self, pipeline, image_store):
        result = pipeline.generate(GenerationRequest(prompt="a cat"))
        image_store.path_for(result.image_id).unlink()

        with pytest.raises(ImageNotFoundError, match="Image file not found"):
            pipeline.resolve_image(result.image_id)

    def test_list_images_delegates_to_store(self, chat_client, image_client):
        store = MagicMock()
        store.find_all.return_value = [_record()]
        pipeline = GenerationPipeline(PromptEnhancer(chat_client), image_client, store)

        assert [r.id for r in pipeline.list_images()] == ["abc123"]
        store.find_all.assert_called_once_with()


class TestDownloadFilename:
    """Attachment names derived from the prompt."""

    def test_slug(self):
        record = _record(prompt="A Beautiful!! Sunset@Sea")
        assert download_filename(record) == "artwork-a-beautiful---sunset-sea-abc123.png"

    def test_prompt_truncated_to_50_characters(self):
        record = _record(prompt="x" * 80)
        assert download_filename(record) == f"artwork-{'x' * 50}-abc123.png"

    def test_non_ascii_replaced(self):
        record = _record(prompt="Café au lait")
        assert download_filename(record) == "artwork-caf--au-lait-abc123.png"

    def test_unicode_case_variants_replaced(self):
        """Characters that only case-fold to ASCII letters are not kept."""
        record = _record(prompt="\u212aelvin \u017ftar \u0131")
        assert download_filename(record) == "artwork--elvin--tar---abc123.png"
