from __future__ import annotations

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import Response

from polkarena.api.errors import http_error_from_service
from polkarena.api.v1.schemas.events import BannerOut
from polkarena.auth.deps import CurrentUser
from polkarena.core.config import settings
from polkarena.services.banner_upload import BannerUploader
from polkarena.services.error_codes import ErrorCode
from polkarena.services.exceptions import PermissionDeniedError, ServiceError
from polkarena.storage.factory import get_storage

router = APIRouter(prefix="/banners", tags=["banners"])


@router.post("", response_model=BannerOut, status_code=201)
async def upload_banner(user: CurrentUser, file: UploadFile = File(...)):
    uploader = BannerUploader(
        get_storage(),
        user.id,
        max_size_mb=settings.banner_max_size_mb,
    )
    try:
        # one byte past the limit is enough to reject oversize files
        data = await file.read(uploader.max_bytes + 1)
        path = await uploader.select_file(
            file.filename or "banner", file.content_type or "", data
        )
    except ServiceError as err:
        raise http_error_from_service(err) from err
    finally:
        await file.close()

    return BannerOut(path=path, url=uploader.preview)


@router.delete("/{path:path}", status_code=204)
async def remove_banner(path: str, user: CurrentUser):
    parts = path.split("/")
    if len(parts) < 2 or parts[0] != str(user.id) or ".." in parts:
        err = PermissionDeniedError(ErrorCode.STORAGE_DELETE_FAILED.value, "not your banner")
        raise http_error_from_service(err)

    uploader = BannerUploader(get_storage(), user.id, value=path)
    await uploader.remove()
    return Response(status_code=204)
