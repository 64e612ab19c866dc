from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO


class StorageError(Exception):
    pass


class BucketNotFoundError(StorageError):
    pass


class ObjectExistsError(StorageError):
    pass


class StorageAdapter(ABC):
    """Object storage scoped to a single bucket."""

    bucket: str

    @abstractmethod
    def put_file(
        self,
        key: str,
        fileobj: BinaryIO,
        *,
        content_type: str | None = None,
        cache_control: str | None = None,
        upsert: bool = False,
    ) -> str:
        """Store content under key and return the stored key.

        Raises ObjectExistsError when the key is taken and ``upsert`` is false.
        """

    @abstractmethod
    def open(self, key: str) -> BinaryIO:
        """Open key for reading in binary mode."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete key if it exists."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return whether key exists."""

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Return a URL a browser can fetch the object from."""
