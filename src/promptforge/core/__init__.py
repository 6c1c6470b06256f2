"""Core functionality for PromptForge.

- **config.py**: Environment-based configuration using Pydantic Settings
- **errors.py**: Exception hierarchy shared by every layer
- **models.py**: Image records, generation requests, and supported sizes
- **store.py**: File-backed image and metadata store
- **enhancer.py**: LLM prompt enhancement with graceful fallback
- **pipeline.py**: Enhance, generate, and persist in one run

Provider backends live in :mod:`promptforge.providers`; the REST API lives in
:mod:`promptforge.api`.
"""

from promptforge.core.config import PromptForgeConfig
from promptforge.core.enhancer import PromptEnhancer
from promptforge.core.errors import (
    CompletionError,
    DownloadError,
    GenerationError,
    ImageNotFoundError,
    InvalidRequestError,
    PromptForgeError,
    ProviderError,
    StorageError,
    UnsupportedProviderOperation,
)
from promptforge.core.models import (
    GenerationRequest,
    GenerationResult,
    ImageQuality,
    ImageRecord,
    ImageSize,
)
from promptforge.core.pipeline import GenerationPipeline, download_filename
from promptforge.core.store import ImageStore

__all__ = [
    "PromptForgeConfig",
    "PromptEnhancer",
    "GenerationPipeline",
    "download_filename",
    "ImageStore",
    "GenerationRequest",
    "GenerationResult",
    "ImageQuality",
    "ImageRecord",
    "ImageSize",
    "PromptForgeError",
    "InvalidRequestError",
    "ImageNotFoundError",
    "ProviderError",
    "GenerationError",
    "CompletionError",
    "UnsupportedProviderOperation",
    "StorageError",
    "DownloadError",
]
