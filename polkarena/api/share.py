from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from polkarena.api.errors import http_error_from_service
from polkarena.db import get_db
from polkarena.services.event_creation import DETAIL_PATH
from polkarena.services.exceptions import ServiceError
from polkarena.services.repositories import SqlEventStore

router = APIRouter(tags=["share"])

DBSession = Annotated[AsyncSession, Depends(get_db)]


@router.get("/e/{code}")
async def resolve_share_link(code: str, db: DBSession):
    try:
        event = await SqlEventStore(db).get_by_short_code(code)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return RedirectResponse(url=DETAIL_PATH.format(event_id=event.id), status_code=307)
