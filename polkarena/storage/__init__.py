from polkarena.storage.base import (
    BucketNotFoundError,
    ObjectExistsError,
    StorageAdapter,
    StorageError,
)
from polkarena.storage.factory import create_storage, get_storage
from polkarena.storage.local import LocalStorageAdapter

__all__ = [
    "BucketNotFoundError",
    "ObjectExistsError",
    "StorageAdapter",
    "StorageError",
    "LocalStorageAdapter",
    "create_storage",
    "get_storage",
]
