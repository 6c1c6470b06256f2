"""End-to-end generation pipeline.

:class:`GenerationPipeline` chains the three steps of a generation run:

1. **Enhance** the user's prompt (:class:`~promptforge.core.enhancer.PromptEnhancer`).
   This step never fails; on error the original prompt is used.
2. **Generate** an image from the enhanced prompt with the configured
   :class:`~promptforge.providers.base.ImageGenerationClient`.
3. **Persist** the image and its record with :class:`~promptforge.core.store.ImageStore`.
   The record stores the *original* prompt, not the enhanced one.

A failure in step 2 or 3 aborts the run and propagates to the caller; no
result is returned.  The pipeline also exposes the read-side helpers used by
the HTTP layer (image resolution, listing, and download filenames).
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import GenerationError, ImageNotFoundError
from .models import GenerationRequest, GenerationResult, ImageRecord, image_url

if TYPE_CHECKING:
    from promptforge.providers.base import ImageGenerationClient

    from .enhancer import PromptEnhancer
    from .store import ImageStore

logger = logging.getLogger(__name__)

DOWNLOAD_SLUG_LENGTH = 50

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


def download_filename(record: ImageRecord) -> str:
    """Build the attachment filename for a stored image.

    The first 50 characters of the prompt are kept, every character that is
    not an ASCII letter or digit becomes ``-``, and the result is lower-cased.

    A record with id ``abc123`` and prompt ``"A Beautiful!! Sunset@Sea"``
    downloads as ``artwork-a-beautiful---sunset-sea-abc123.png``.
    """
    slug = _NON_ALPHANUMERIC.sub("-", record.prompt[:DOWNLOAD_SLUG_LENGTH]).lower()
    return f"artwork-{slug}-{record.id}.png"


class GenerationPipeline:
    """Compose prompt enhancement, image generation, and storage.

    Args:
        enhancer: Prompt enhancer.
        image_client: Image generation backend.
        store: Image and metadata store.
    """

    def __init__(
        self,
        enhancer: PromptEnhancer,
        image_client: ImageGenerationClient,
        store: ImageStore,
    ) -> None:
        self.enhancer = enhancer
        self.image_client = image_client
        self.store = store

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one generation and return the stored image reference.

        Raises:
            GenerationError: If the image backend fails or returns no URL.
            UnsupportedProviderOperation: If the backend cannot generate images.
            StorageError: If the image cannot be downloaded or stored.
        """
        logger.info(f"Generating image for prompt: {request.prompt}")

        enhanced_prompt = self.enhancer.enhance(request.prompt)
        logger.debug(f"Enhanced prompt: {enhanced_prompt}")

        source_url = self.image_client.generate_image(
            enhanced_prompt,
            request.size.value,
            request.quality.value,
        )
        if not source_url:
            raise GenerationError(
                "Image generation returned no URL", self.image_client.provider_name
            )

        image_id = self.store.save(
            source_url,
            request.prompt,
            size=request.size.value,
            quality=request.quality.value,
        )

        return GenerationResult(image_id=image_id, url=image_url(image_id), prompt=request.prompt)

    def resolve_image(self, image_id: str) -> tuple[ImageRecord, Path]:
        """Return the record and image path for *image_id*.

        Raises:
            ImageNotFoundError: If there is no record, or the record exists but
                its image file is missing.
        """
        record = self.store.find_by_id(image_id)
        if record is None:
            raise ImageNotFoundError("Image not found")

        if not self.store.exists(image_id):
            logger.warning(f"Record {image_id} has no image file")
            raise ImageNotFoundError("Image file not found")

        return record, self.store.path_for(image_id)

    def list_images(self) -> list[ImageRecord]:
        """Return every stored record, newest first."""
        return self.store.find_all()
