from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Point the app at throwaway sqlite + storage before it is imported
_TMP = Path(tempfile.mkdtemp(prefix="polkarena-tests-"))
os.environ["ENV"] = "local"
os.environ["AUTH_MODE"] = "dev"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{(_TMP / 'test.db').as_posix()}"
os.environ.setdefault("DB_AUTO_CREATE", "true")
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_ROOT"] = str(_TMP / "storage")
os.environ["DEFAULT_TIMEZONE"] = "UTC"
os.environ.pop("PUBLIC_BASE_URL", None)

from polkarena.db import init_models  # noqa: E402
from polkarena.main import app  # noqa: E402


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def clean_db():
    # Ensure a clean slate for each test
    asyncio.run(init_models(drop=True))
    yield
