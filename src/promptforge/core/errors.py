"""Exception hierarchy for PromptForge.

Every error that can cross the HTTP boundary derives from
:class:`PromptForgeError` and carries the status code and short title used
by the API exception handler.  The message of the exception is surfaced to
the caller as-is.

Hierarchy
---------
::

    PromptForgeError
    ├── InvalidRequestError           400
    ├── ImageNotFoundError            404
    ├── ProviderError                 500
    │   ├── GenerationError
    │   ├── CompletionError
    │   └── UnsupportedProviderOperation
    └── StorageError                  500
        └── DownloadError
"""

from __future__ import annotations


class PromptForgeError(Exception):
    """Base class for all PromptForge errors."""

    status_code: int = 500
    title: str | None = None


class InvalidRequestError(PromptForgeError):
    """Raised when user input fails validation.

    The message is intended to be displayed directly to the user.
    """

    status_code = 400


class ImageNotFoundError(PromptForgeError):
    """Raised when an image record or its backing file does not exist."""

    status_code = 404


class ProviderError(PromptForgeError):
    """Base class for errors raised by an AI provider backend."""

    def __init__(self, message: str, provider: str = "unknown") -> None:
        super().__init__(message)
        self.provider = provider


class GenerationError(ProviderError):
    """Raised when the image generation call fails or returns nothing usable."""

    title = "Failed to generate image"


class CompletionError(ProviderError):
    """Raised when a chat completion call fails."""

    title = "Failed to complete prompt"


class UnsupportedProviderOperation(ProviderError):
    """Raised when the selected provider does not implement an operation."""

    title = "Unsupported provider operation"


class StorageError(PromptForgeError):
    """Raised when an image or its metadata cannot be persisted or scanned."""

    title = "Storage failure"


class DownloadError(StorageError):
    """Raised when the generated image cannot be fetched from its URL."""

    title = "Failed to download image"
