from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import BinaryIO

from polkarena.storage.base import BucketNotFoundError, ObjectExistsError, StorageAdapter

MEDIA_PREFIX = "/media"


class LocalStorageAdapter(StorageAdapter):
    """Filesystem bucket at ``<root>/<bucket>``, served by the app under ``/media``.

    Cache-control and content-type are not persisted; the static file handler
    derives the content type from the key's extension.
    """

    def __init__(
        self,
        root: Path,
        bucket: str,
        *,
        public_base_url: str = "",
        create_bucket: bool = True,
    ) -> None:
        self.bucket = bucket
        self._root = root.resolve()
        self._bucket_dir = self._root / bucket
        self._public_base_url = public_base_url.rstrip("/")
        if create_bucket:
            self._bucket_dir.mkdir(parents=True, exist_ok=True)

    def _normalize_key(self, key: str) -> str:
        normalized = key.strip().lstrip("/")
        path_key = PurePosixPath(normalized)
        if not normalized or path_key.is_absolute() or ".." in path_key.parts:
            raise ValueError(f"invalid storage key: {key!r}")
        return str(path_key)

    def _path_for_key(self, key: str) -> Path:
        if not self._bucket_dir.is_dir():
            raise BucketNotFoundError(f"Bucket not found: {self.bucket}")
        normalized = self._normalize_key(key)
        return self._bucket_dir.joinpath(*PurePosixPath(normalized).parts)

    def put_file(
        self,
        key: str,
        fileobj: BinaryIO,
        *,
        content_type: str | None = None,
        cache_control: str | None = None,
        upsert: bool = False,
    ) -> str:
        path = self._path_for_key(key)
        if path.exists() and not upsert:
            raise ObjectExistsError(f"The resource already exists: {key}")
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as out:
            while True:
                chunk = fileobj.read(1024 * 1024)
                if not chunk:
                    break
                out.write(chunk)
        return self._normalize_key(key)

    def open(self, key: str) -> BinaryIO:
        return self._path_for_key(key).open("rb")

    def delete(self, key: str) -> None:
        path = self._path_for_key(key)
        if path.exists():
            path.unlink()

    def exists(self, key: str) -> bool:
        return self._path_for_key(key).exists()

    def public_url(self, key: str) -> str:
        normalized = self._normalize_key(key)
        return f"{self._public_base_url}{MEDIA_PREFIX}/{self.bucket}/{normalized}"
