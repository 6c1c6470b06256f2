"""Tests for the domain types in promptforge.core.models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from promptforge.core.errors import InvalidRequestError
from promptforge.core.models import (
    GenerationRequest,
    ImageQuality,
    ImageRecord,
    ImageSize,
    image_url,
)


class TestGenerationRequest:
    """Validation and coercion of generation requests."""

    def test_defaults(self):
        request = GenerationRequest(prompt="a cat")
        assert request.size is ImageSize.SQUARE
        assert request.quality is ImageQuality.STANDARD

    def test_string_values_are_coerced(self):
        request = GenerationRequest(prompt="a cat", size="1792x1024", quality="hd")
        assert request.size is ImageSize.LANDSCAPE
        assert request.quality is ImageQuality.HD

    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
    def test_empty_prompt_rejected(self, prompt):
        with pytest.raises(InvalidRequestError, match="Prompt cannot be empty"):
            GenerationRequest(prompt=prompt)

    def test_unsupported_size(self):
        with pytest.raises(InvalidRequestError, match="Unsupported size '512x512'"):
            GenerationRequest(prompt="a cat", size="512x512")

    def test_unsupported_quality(self):
        with pytest.raises(InvalidRequestError, match="Unsupported quality 'ultra'"):
            GenerationRequest(prompt="a cat", quality="ultra")

    def test_prompt_is_kept_verbatim(self):
        """Surrounding whitespace is not stripped from a valid prompt."""
        request = GenerationRequest(prompt="  a cat ")
        assert request.prompt == "  a cat "


class TestImageRecord:
    """Serialisation of persisted image records."""

    def test_to_dict(self):
        record = ImageRecord(
            id="abc123",
            prompt="a cat",
            created_at=datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc),
            size="1024x1024",
            quality="hd",
        )
        assert record.to_dict() == {
            "id": "abc123",
            "prompt": "a cat",
            "created_at": "2024-05-01T12:30:15.123Z",
            "size": "1024x1024",
            "quality": "hd",
        }

    def test_to_dict_converts_to_utc(self):
        offset = timezone(timedelta(hours=2))
        record = ImageRecord(
            id="abc123",
            prompt="a cat",
            created_at=datetime(2024, 5, 1, 14, 0, tzinfo=offset),
        )
        assert record.to_dict()["created_at"] == "2024-05-01T12:00:00.000Z"

    def test_from_dict(self):
        record = ImageRecord.from_dict(
            {"id": "abc123", "prompt": "a cat", "created_at": "2024-05-01T12:30:15.123Z"}
        )
        assert record.id == "abc123"
        assert record.created_at == datetime(2024, 5, 1, 12, 30, 15, 123000, tzinfo=timezone.utc)
        assert record.size is None
        assert record.quality is None

    def test_from_dict_accepts_legacy_key(self):
        record = ImageRecord.from_dict(
            {"id": "abc123", "prompt": "a cat", "createdAt": "2024-05-01T12:30:15.123Z"}
        )
        assert record.created_at.year == 2024

    def test_naive_timestamp_is_utc(self):
        record = ImageRecord.from_dict(
            {"id": "abc123", "prompt": "a cat", "created_at": "2024-05-01T12:30:15"}
        )
        assert record.created_at.tzinfo == timezone.utc

    @pytest.mark.parametrize(
        "data",
        [
            {"prompt": "a cat", "created_at": "2024-05-01T12:30:15Z"},
            {"id": "abc123", "created_at": "2024-05-01T12:30:15Z"},
            {"id": "abc123", "prompt": "a cat"},
            {"id": "abc123", "prompt": "a cat", "created_at": "yesterday"},
            ["not", "an", "object"],
            {"id": "abc123", "prompt": "a cat", "created_at": "2024-05-01T12:30:15Z", "size": 123},
            {"id": "abc123", "prompt": "a cat", "created_at": "2024-05-01T12:30:15Z", "quality": ["hd"]},
        ],
    )
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(ValueError):
            ImageRecord.from_dict(data)


def test_image_url():
    assert image_url("abc123") == "/api/images/abc123"
