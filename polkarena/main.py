from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator

from polkarena.api.share import router as share_router
from polkarena.api.v1.router import router as v1_router
from polkarena.core.config import settings
from polkarena.core.logging import configure_logging
from polkarena.db import init_models
from polkarena.middleware.request_id import RequestIdMiddleware
from polkarena.middleware.security_headers import SecurityHeadersMiddleware
from polkarena.storage.factory import get_storage
from polkarena.storage.local import MEDIA_PREFIX

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.db_auto_create:
        await init_models()
    # creates the local bucket directory before /media serves from it
    get_storage()
    yield


app = FastAPI(title="Polkarena Events API", lifespan=lifespan)

# Starlette runs the LAST added middleware FIRST (outermost), so request ids
# and security headers also cover CORS preflight responses.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)

Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.get("/")
def root():
    return {"name": "Polkarena Events API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(v1_router, prefix="/v1")
app.include_router(share_router)

if settings.storage_backend == "local":
    app.mount(
        MEDIA_PREFIX,
        StaticFiles(directory=settings.storage_root, check_dir=False),
        name="media",
    )
