"""Domain types for image generation and storage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import InvalidRequestError


IMAGE_URL_PREFIX = "/api/images"


class ImageSize(str, Enum):
    """Aspect ratios accepted by the image generation backends."""

    SQUARE = "1024x1024"
    LANDSCAPE = "1792x1024"
    PORTRAIT = "1024x1792"


class ImageQuality(str, Enum):
    """Quality tiers accepted by the image generation backends."""

    STANDARD = "standard"
    HD = "hd"


def _format_timestamp(value: datetime) -> str:
    # Millisecond precision with a trailing "Z", as browsers emit it.
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class ImageRecord:
    """Persisted metadata describing one generated image.

    ``prompt`` is always the text the user submitted, never the enhanced
    prompt that was sent to the image backend.
    """

    id: str
    prompt: str
    created_at: datetime
    size: str | None = None
    quality: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        return {
            "id": self.id,
            "prompt": self.prompt,
            "created_at": _format_timestamp(self.created_at),
            "size": self.size,
            "quality": self.quality,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImageRecord:
        """Build a record from a dictionary produced by :meth:`to_dict`.

        Records written by earlier versions used a ``createdAt`` key; both
        spellings are accepted.

        Raises:
            ValueError: If a required field is missing or malformed.
        """
        if not isinstance(data, dict):
            raise ValueError("Record must be a JSON object")

        image_id = data.get("id")
        prompt = data.get("prompt")
        created_at = data.get("created_at", data.get("createdAt"))

        if not image_id or not isinstance(image_id, str):
            raise ValueError("Record is missing 'id'")
        if not isinstance(prompt, str):
            raise ValueError("Record is missing 'prompt'")
        if not isinstance(created_at, str):
            raise ValueError("Record is missing 'created_at'")

        size = data.get("size")
        quality = data.get("quality")
        for name, value in (("size", size), ("quality", quality)):
            if value is not None and not isinstance(value, str):
                raise ValueError(f"Record field '{name}' must be a string")

        return cls(
            id=image_id,
            prompt=prompt,
            created_at=_parse_timestamp(created_at),
            size=size,
            quality=quality,
        )


@dataclass(frozen=True)
class GenerationRequest:
    """A validated request to generate one image.

    ``size`` and ``quality`` accept either the enum members or their string
    values.

    Raises:
        InvalidRequestError: If the prompt is empty or whitespace, or if
            ``size``/``quality`` is not one of the supported values.
    """

    prompt: str
    size: ImageSize = ImageSize.SQUARE
    quality: ImageQuality = ImageQuality.STANDARD

    def __post_init__(self) -> None:
        if not isinstance(self.prompt, str) or not self.prompt.strip():
            raise InvalidRequestError("Prompt cannot be empty")

        try:
            size = ImageSize(self.size)
        except ValueError as e:
            allowed = ", ".join(s.value for s in ImageSize)
            raise InvalidRequestError(f"Unsupported size '{self.size}'. Use one of: {allowed}") from e

        try:
            quality = ImageQuality(self.quality)
        except ValueError as e:
            allowed = ", ".join(q.value for q in ImageQuality)
            raise InvalidRequestError(
                f"Unsupported quality '{self.quality}'. Use one of: {allowed}"
            ) from e

        # Frozen dataclass: coerce through object.__setattr__.
        object.__setattr__(self, "size", size)
        object.__setattr__(self, "quality", quality)


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a successful pipeline run."""

    image_id: str
    url: str
    prompt: str


def image_url(image_id: str) -> str:
    """Public path under which a stored image is served."""
    return f"{IMAGE_URL_PREFIX}/{image_id}"
