from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, NoResultFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from polkarena.api.v1.schemas.events import EventCreate
from polkarena.models import Event, User
from polkarena.services.error_codes import ErrorCode
from polkarena.services.exceptions import (
    ConflictError,
    NotFoundError,
    UpstreamError,
)
from polkarena.services.shortcodes import LookupOutcome

logger = structlog.get_logger()


def _db_message(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc)


class SqlShortCodeLookup:
    """Answers whether a short code is already assigned to an event."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def __call__(self, code: str) -> LookupOutcome:
        try:
            result = await self.db.execute(select(Event.id).where(Event.short_code == code))
            result.scalar_one()
        except NoResultFound:
            return LookupOutcome.AVAILABLE
        except MultipleResultsFound:
            return LookupOutcome.TAKEN
        except SQLAlchemyError:
            logger.exception("short_code_lookup_error", short_code=code)
            await self.db.rollback()
            return LookupOutcome.FAILED
        return LookupOutcome.TAKEN


class SqlEventStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def insert(
        self, record: EventCreate, *, organizer_id: uuid.UUID, organizer_name: str
    ) -> Event:
        data = record.model_dump(exclude={"custom_fields"})
        custom_fields = None
        if record.custom_fields:
            custom_fields = [field.model_dump(mode="json") for field in record.custom_fields]

        event = Event(
            **data,
            custom_fields=custom_fields,
            organizer_id=organizer_id,
            organizer_name=organizer_name,
        )
        self.db.add(event)

        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if "short_code" in str(exc.orig):
                raise ConflictError(
                    ErrorCode.SHORT_CODE_TAKEN.value,
                    "Failed to create event: short code already in use, please try again",
                ) from exc
            raise ConflictError(
                ErrorCode.EVENT_CREATE_FAILED.value,
                f"Failed to create event: {_db_message(exc)}",
            ) from exc
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise UpstreamError(
                ErrorCode.EVENT_CREATE_FAILED.value,
                f"Failed to create event: {_db_message(exc)}",
            ) from exc
        except Exception:
            # driver-level failures (bind overflow) still leave the session usable
            await self.db.rollback()
            raise

        await self.db.refresh(event)
        return event

    async def get(self, event_id: uuid.UUID) -> Event:
        event = await self.db.get(Event, event_id)
        if not event:
            raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "event not found")
        return event

    async def get_by_short_code(self, code: str) -> Event:
        event = await self.db.scalar(select(Event).where(Event.short_code == code.lower()))
        if not event:
            raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "event not found")
        return event


class SqlProfileLookup:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def display_name(self, user_id: uuid.UUID) -> str | None:
        try:
            return await self.db.scalar(select(User.name).where(User.id == user_id))
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise UpstreamError(
                ErrorCode.PROFILE_LOOKUP_FAILED.value, _db_message(exc)
            ) from exc

    async def ensure(self, user_id: uuid.UUID) -> None:
        try:
            user = await self.db.get(User, user_id)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise UpstreamError(
                ErrorCode.PROFILE_LOOKUP_FAILED.value, "Failed to load user profile"
            ) from exc
        if user is None:
            raise NotFoundError(ErrorCode.PROFILE_NOT_FOUND.value, "Failed to load user profile")
