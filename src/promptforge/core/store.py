"""File-backed image and metadata storage.

The store keeps a flat directory with one image file and one JSON sidecar per
generated image, both named by the image id::

    generated-images/
        3f2c...e1.png
        3f2c...e1.json

There is no index file: listing scans the directory for ``*.json`` records.
Because users may edit the directory by hand, the existence of the image file
is checked independently of the record (:meth:`ImageStore.exists`), which lets
callers tell a missing record from a record whose image was removed.

Write Order
-----------
The image is committed before its record, and both are written to a temporary
file first and moved into place with :func:`os.replace`.  A record therefore
never points at a half-written image.  If writing the record fails after the
image was committed, the image is removed again and :class:`StorageError` is
raised.
"""

from __future__ import annotations

import io
import json
import logging
import os
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path

import httpx
from PIL import Image, UnidentifiedImageError

from .errors import DownloadError, StorageError
from .models import ImageRecord

logger = logging.getLogger(__name__)

IMAGE_SUFFIX = ".png"
RECORD_SUFFIX = ".json"

REDIRECT_STATUS_CODES = {301, 302, 303, 307, 308}

# Ids are generated by the store, but they also arrive from URLs.  Anything
# that is not a plain file-name token is never mapped onto the file system.
_SAFE_ID = re.compile(r"[A-Za-z0-9_-]+")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _write_atomic(path: Path, data: bytes) -> None:
    """Write *data* to a sibling temporary file, then move it onto *path*."""
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp_path, "wb") as handle:
            handle.write(data)
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


class ImageStore:
    """Persist generated images and their metadata in a directory.

    Args:
        storage_dir: Directory holding the image and record files.  It is
            created if it does not exist.
        http_client: Client used to download images.  Defaults to a new
            :class:`httpx.Client`; tests inject one with a mock transport.
        max_redirects: Maximum number of redirects followed per download.
        timeout: Download timeout in seconds (used only for the default
            client).
    """

    def __init__(
        self,
        storage_dir: Path,
        *,
        http_client: httpx.Client | None = None,
        max_redirects: int = 5,
        timeout: float = 60.0,
    ) -> None:
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.max_redirects = max_redirects
        self._http = http_client or httpx.Client(timeout=timeout, follow_redirects=False)

    def close(self) -> None:
        self._http.close()

    # -- Paths --------------------------------------------------------------

    def path_for(self, image_id: str) -> Path:
        """Return the image file path for *image_id*.  No I/O."""
        return self.storage_dir / f"{image_id}{IMAGE_SUFFIX}"

    def _record_path(self, image_id: str) -> Path:
        return self.storage_dir / f"{image_id}{RECORD_SUFFIX}"

    # -- Queries ------------------------------------------------------------

    def exists(self, image_id: str) -> bool:
        """Check whether the image file exists, regardless of its record."""
        if not _SAFE_ID.fullmatch(image_id):
            return False
        return self.path_for(image_id).is_file()

    def find_by_id(self, image_id: str) -> ImageRecord | None:
        """Load the record for *image_id*.

        Returns:
            The record, or ``None`` if there is no record file or it cannot
            be parsed.
        """
        if not _SAFE_ID.fullmatch(image_id):
            return None

        record_path = self._record_path(image_id)
        if not record_path.is_file():
            return None

        try:
            return self._read_record(record_path)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading metadata for {image_id}: {e}")
            return None

    def find_all(self) -> list[ImageRecord]:
        """Load every readable record, newest first.

        Unreadable records are logged and skipped.

        Raises:
            StorageError: If the storage directory cannot be scanned.
        """
        try:
            record_paths = sorted(self.storage_dir.glob(f"*{RECORD_SUFFIX}"))
        except OSError as e:
            raise StorageError(f"Failed to scan {self.storage_dir}: {e}") from e

        records: list[ImageRecord] = []
        for record_path in record_paths:
            try:
                records.append(self._read_record(record_path))
            except (OSError, ValueError) as e:
                logger.error(f"Error reading metadata for {record_path.name}: {e}")

        records.sort(key=lambda record: record.created_at, reverse=True)
        return records

    @staticmethod
    def _read_record(record_path: Path) -> ImageRecord:
        with open(record_path, encoding="utf-8") as handle:
            # json.JSONDecodeError is a ValueError subclass.
            return ImageRecord.from_dict(json.load(handle))

    # -- Writes -------------------------------------------------------------

    def save(
        self,
        source_url: str,
        prompt: str,
        size: str | None = None,
        quality: str | None = None,
    ) -> str:
        """Download the image at *source_url* and store it with its metadata.

        Args:
            source_url: URL returned by the image generation backend.
            prompt: Original user prompt to record.
            size: Optional size tag.
            quality: Optional quality tag.

        Returns:
            The newly generated image id.

        Raises:
            DownloadError: If the image cannot be fetched or decoded.
            StorageError: If the image or its record cannot be written.
        """
        payload = self._download(source_url)
        png_bytes = self._to_png(payload)

        image_id = uuid.uuid4().hex
        image_path = self.path_for(image_id)
        record_path = self._record_path(image_id)

        try:
            _write_atomic(image_path, png_bytes)
        except OSError as e:
            raise StorageError(f"Failed to write image {image_path.name}: {e}") from e

        record = ImageRecord(
            id=image_id,
            prompt=prompt,
            created_at=_utcnow(),
            size=size,
            quality=quality,
        )
        try:
            _write_atomic(record_path, json.dumps(record.to_dict(), indent=2).encode("utf-8"))
        except OSError as e:
            image_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write metadata {record_path.name}: {e}") from e

        logger.info(f"Saved image {image_id} ({len(png_bytes)} bytes)")
        return image_id

    def _download(self, url: str) -> bytes:
        """Fetch *url*, following at most ``max_redirects`` redirects."""
        current = httpx.URL(url)

        for _ in range(self.max_redirects + 1):
            try:
                response = self._http.get(current)
            except httpx.HTTPError as e:
                raise DownloadError(f"Failed to download image: {e}") from e

            if response.status_code in REDIRECT_STATUS_CODES:
                location = response.headers.get("location")
                if not location:
                    raise DownloadError("Redirect without location header")
                current = current.join(location)
                logger.debug(f"Following redirect to {current}")
                continue

            if not response.is_success:
                raise DownloadError(f"Failed to download image: {response.status_code}")

            return response.content

        raise DownloadError(f"Too many redirects (limit {self.max_redirects})")

    @staticmethod
    def _to_png(payload: bytes) -> bytes:
        """Validate the payload as an image and return it PNG-encoded."""
        try:
            image = Image.open(io.BytesIO(payload))
            image_format = image.format
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise DownloadError(f"Downloaded content is not a valid image: {e}") from e

        if image_format == "PNG":
            return payload

        buffer = io.BytesIO()
        if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            image = image.convert("RGBA")
        image.save(buffer, format="PNG")
        return buffer.getvalue()
