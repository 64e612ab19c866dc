from __future__ import annotations

import asyncio
import base64
import io
import re
import time
import uuid
from pathlib import PurePosixPath
from typing import Callable

import structlog

from polkarena.services.error_codes import ErrorCode
from polkarena.services.exceptions import UpstreamError, ValidationError
from polkarena.storage.base import BucketNotFoundError, StorageAdapter, StorageError

logger = structlog.get_logger()

DEFAULT_MAX_SIZE_MB = 5
CACHE_CONTROL = "3600"
EXTENSION_SANITIZE_RE = re.compile(r"[^a-z0-9]+")


def _extension(filename: str, content_type: str) -> str:
    suffix = EXTENSION_SANITIZE_RE.sub("", PurePosixPath(filename).suffix.lower())
    if suffix:
        return suffix
    subtype = content_type.partition("/")[2].partition("+")[0]
    return EXTENSION_SANITIZE_RE.sub("", subtype.lower()) or "img"


def data_url(content_type: str, data: bytes) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


class BannerUploader:
    """State for a single optional event banner.

    ``preview`` holds what the form should display: a ``data:`` URL while the
    upload is in flight, then the object's public URL. ``path`` is the storage
    key reported to ``on_change`` and saved on the event record.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        owner_id: uuid.UUID | str,
        *,
        max_size_mb: int = DEFAULT_MAX_SIZE_MB,
        value: str | None = None,
        on_change: Callable[[str | None], None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self.owner_id = str(owner_id)
        self.max_size_mb = max_size_mb
        self.on_change = on_change
        self.clock = clock
        self.path = value
        self.preview = storage.public_url(value) if value else None
        self.uploading = False

    @property
    def max_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024

    def _notify(self, path: str | None) -> None:
        if self.on_change is not None:
            self.on_change(path)

    def _validate(self, content_type: str, data: bytes) -> None:
        if len(data) > self.max_bytes:
            raise ValidationError(
                ErrorCode.FILE_TOO_LARGE.value,
                f"File size must be less than {self.max_size_mb}MB",
            )
        if not content_type.startswith("image/"):
            raise ValidationError(ErrorCode.INVALID_MIME_TYPE.value, "Please select an image file")
        if not data:
            raise ValidationError(ErrorCode.EMPTY_FILE.value, "uploaded file is empty")

    async def select_file(self, filename: str, content_type: str, data: bytes) -> str:
        content_type = (content_type or "").lower()
        self._validate(content_type, data)

        key = f"{self.owner_id}/{int(self.clock() * 1000)}.{_extension(filename, content_type)}"

        self.uploading = True
        self.preview = data_url(content_type, data)
        try:
            stored = await asyncio.to_thread(
                self.storage.put_file,
                key,
                io.BytesIO(data),
                content_type=content_type,
                cache_control=CACHE_CONTROL,
                upsert=False,
            )
        except BucketNotFoundError as exc:
            self.preview = None
            logger.error("banner_upload_failed", key=key, error=str(exc))
            raise UpstreamError(
                ErrorCode.STORAGE_BUCKET_MISSING.value,
                "Storage bucket not configured. Please contact support.",
            ) from exc
        except (StorageError, OSError) as exc:
            self.preview = None
            logger.error("banner_upload_failed", key=key, error=str(exc))
            raise UpstreamError(
                ErrorCode.STORAGE_WRITE_FAILED.value, str(exc) or "Failed to upload image"
            ) from exc
        finally:
            self.uploading = False

        self.path = stored
        self.preview = self.storage.public_url(stored)
        self._notify(stored)
        logger.info("banner_uploaded", key=stored, size=len(data))
        return stored

    async def remove(self) -> None:
        if not self.path:
            return

        try:
            await asyncio.to_thread(self.storage.delete, self.path)
        except (StorageError, OSError):
            # local state is cleared regardless; the object may be left behind
            logger.exception("banner_delete_failed", key=self.path)

        self.path = None
        self.preview = None
        self._notify(None)
