from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from polkarena.core.config import settings
from polkarena.storage.base import StorageAdapter
from polkarena.storage.local import LocalStorageAdapter


def create_storage(
    backend: str | None = None,
    root: str | Path | None = None,
    bucket: str | None = None,
) -> StorageAdapter:
    selected_backend = (backend or settings.storage_backend).strip().lower()
    if selected_backend == "local":
        return LocalStorageAdapter(
            Path(root or settings.storage_root),
            bucket or settings.banner_bucket,
            public_base_url=settings.public_base_url or "",
        )
    raise ValueError(f"unsupported storage backend: {selected_backend}")


@lru_cache(maxsize=1)
def get_storage() -> StorageAdapter:
    return create_storage()
