"""Pydantic request and response models for the PromptForge API.

Models
------
GenerateRequest
    Payload for ``POST /api/images/generate``.
GenerateResponse
    Successful generation result.
ImageRecordOut
    One gallery entry as returned by ``GET /api/images/``.
GalleryResponse
    Payload of ``GET /api/images/``.
ErrorResponse
    Body returned for every handled error.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from promptforge.core.models import ImageQuality, ImageRecord, ImageSize


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/images/generate`` endpoint.

    ``prompt`` is optional at the schema level so that a missing prompt is
    reported as a 400 by the handler rather than a schema error.  ``size``
    and ``quality`` are validated when the domain request is built.

    Attributes:
        prompt: Text description of the image.
        size: One of ``1024x1024``, ``1792x1024``, ``1024x1792``.
        quality: ``standard`` or ``hd``.
    """

    prompt: str | None = Field(
        default=None,
        description="Text description of the image to generate.",
    )
    size: str = Field(
        default=ImageSize.SQUARE.value,
        description="Image size (1024x1024, 1792x1024, or 1024x1792).",
    )
    quality: str = Field(
        default=ImageQuality.STANDARD.value,
        description="Image quality tier (standard or hd).",
    )


class GenerateResponse(BaseModel):
    """Response body for a successful generation."""

    success: bool = True
    id: str
    url: str
    prompt: str


class ImageRecordOut(BaseModel):
    """Serialised :class:`~promptforge.core.models.ImageRecord`."""

    id: str
    prompt: str
    created_at: str = Field(description="ISO-8601 UTC timestamp.")
    size: str | None = None
    quality: str | None = None

    @classmethod
    def from_record(cls, record: ImageRecord) -> ImageRecordOut:
        return cls(**record.to_dict())


class GalleryResponse(BaseModel):
    """Response body for the gallery listing."""

    success: bool = True
    images: list[ImageRecordOut]


class ErrorResponse(BaseModel):
    """Body returned for every handled error."""

    success: bool = False
    error: str
    message: str
