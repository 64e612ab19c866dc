from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from polkarena.api.errors import http_error_from_service
from polkarena.api.v1.schemas.events import (
    EventCreatedOut,
    EventDetailOut,
    EventFormState,
    EventOut,
)
from polkarena.auth.deps import CurrentUser
from polkarena.core.config import settings
from polkarena.db import get_db
from polkarena.models import Event
from polkarena.services.event_creation import EventCreationController, InFlightGuard
from polkarena.services.exceptions import ServiceError
from polkarena.services.repositories import SqlEventStore, SqlProfileLookup, SqlShortCodeLookup
from polkarena.services.sharing import build_share_url, format_duration
from polkarena.services.shortcodes import LookupErrorPolicy, ShortCodePolicy
from polkarena.storage.factory import get_storage

router = APIRouter(prefix="/events", tags=["events"])

DBSession = Annotated[AsyncSession, Depends(get_db)]

# one in-flight create per organizer across this process
_submissions = InFlightGuard()


def _short_code_policy() -> ShortCodePolicy:
    return ShortCodePolicy(
        max_attempts=settings.short_code_max_attempts,
        on_lookup_error=LookupErrorPolicy(settings.short_code_lookup_errors.strip().lower()),
    )


def _controller(db: AsyncSession) -> EventCreationController:
    return EventCreationController(
        store=SqlEventStore(db),
        profiles=SqlProfileLookup(db),
        short_code_lookup=SqlShortCodeLookup(db),
        policy=_short_code_policy(),
        guard=_submissions,
    )


def _detail_fields(event: Event, request: Request) -> dict:
    share_url = None
    if event.short_code:
        share_url = build_share_url(
            event.short_code, settings.public_base_url or str(request.base_url)
        )

    banner_url = None
    if event.banner_image_url:
        banner_url = get_storage().public_url(event.banner_image_url)

    return {
        **EventOut.model_validate(event).model_dump(),
        "share_url": share_url,
        "banner_url": banner_url,
        "duration": format_duration(event.start_time, event.end_time),
    }


@router.post("", response_model=EventCreatedOut, status_code=201)
async def create_event(
    payload: EventFormState,
    user: CurrentUser,
    db: DBSession,
    request: Request,
):
    controller = _controller(db)
    try:
        await controller.prepare(user)
    except ServiceError as err:
        raise http_error_from_service(err) from err

    outcome = await controller.submit(payload, user)
    if outcome.error is not None:
        raise http_error_from_service(outcome.error)

    return EventCreatedOut(
        **_detail_fields(outcome.event, request),
        detail_url=outcome.redirect_to,
        short_code_verified=outcome.short_code.verified,
        message=outcome.message,
    )


@router.get("/{event_id}", response_model=EventDetailOut)
async def get_event(event_id: uuid.UUID, db: DBSession, request: Request):
    try:
        event = await SqlEventStore(db).get(event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return EventDetailOut(**_detail_fields(event, request))
