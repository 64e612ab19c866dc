from __future__ import annotations

import uuid
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Callable, Protocol

import structlog

from polkarena.api.v1.schemas.events import EventCreate, EventFormState
from polkarena.models import Event, User
from polkarena.models.user import ANONYMOUS_NAME
from polkarena.services.error_codes import ErrorCode
from polkarena.services.event_form import validate_event_form
from polkarena.services.exceptions import ConflictError, ServiceError
from polkarena.services.shortcodes import (
    ShortCodeLookup,
    ShortCodePolicy,
    ShortCodeResult,
    generate_unique_short_code,
)

logger = structlog.get_logger()

DETAIL_PATH = "/v1/events/{event_id}"
CREATED_MESSAGE = "Event created successfully!"


class EventStore(Protocol):
    async def insert(
        self, record: EventCreate, *, organizer_id: uuid.UUID, organizer_name: str
    ) -> Event: ...


class ProfileLookup(Protocol):
    async def display_name(self, user_id: uuid.UUID) -> str | None: ...

    async def ensure(self, user_id: uuid.UUID) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InFlightGuard:
    """Allows one outstanding submission per key (organizer) at a time."""

    def __init__(self) -> None:
        self._active: set[Hashable] = set()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._active

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        if key in self._active:
            raise ConflictError(
                ErrorCode.SUBMISSION_IN_PROGRESS.value,
                "This event is already being created, please wait",
            )
        self._active.add(key)
        try:
            yield
        finally:
            self._active.discard(key)


@dataclass
class SubmitOutcome:
    event: Event | None = None
    short_code: ShortCodeResult | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.event is not None

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.message
        return CREATED_MESSAGE

    @property
    def redirect_to(self) -> str | None:
        if self.event is None:
            return None
        return DETAIL_PATH.format(event_id=self.event.id)


class EventCreationController:
    """Drives one organizer's create-event form through validation and the write.

    ``submit`` never raises for validation or collaborator failures; the
    outcome carries the error so the caller can show it and let the organizer
    retry with the form untouched.
    """

    def __init__(
        self,
        *,
        store: EventStore,
        profiles: ProfileLookup,
        short_code_lookup: ShortCodeLookup,
        policy: ShortCodePolicy | None = None,
        guard: InFlightGuard | None = None,
        clock: Callable[[], datetime] = _utcnow,
        tz: tzinfo | None = None,
    ) -> None:
        self.store = store
        self.profiles = profiles
        self.short_code_lookup = short_code_lookup
        self.policy = policy or ShortCodePolicy()
        self.guard = guard or InFlightGuard()
        self.clock = clock
        self.tz = tz
        self.loading = True
        self.saving = False

    async def prepare(self, organizer: User) -> None:
        self.loading = True
        await self.profiles.ensure(organizer.id)
        self.loading = False

    async def submit(self, form: EventFormState, organizer: User) -> SubmitOutcome:
        try:
            with self.guard.hold(organizer.id):
                self.saving = True
                try:
                    return await self._submit(form, organizer)
                finally:
                    self.saving = False
        except ServiceError as err:
            logger.info(
                "event_submit_failed",
                organizer_id=str(organizer.id),
                code=err.code,
                message=err.message,
            )
            return SubmitOutcome(error=err)

    async def _submit(self, form: EventFormState, organizer: User) -> SubmitOutcome:
        record = validate_event_form(form, now=self.clock(), tz=self.tz)

        organizer_name = await self._organizer_name(organizer)

        short_code = await generate_unique_short_code(
            form.name, self.short_code_lookup, self.policy
        )
        record = record.model_copy(update={"short_code": short_code.code})

        event = await self.store.insert(
            record, organizer_id=organizer.id, organizer_name=organizer_name
        )
        logger.info(
            "event_created",
            event_id=str(event.id),
            organizer_id=str(organizer.id),
            short_code=short_code.code,
            short_code_verified=short_code.verified,
        )
        return SubmitOutcome(event=event, short_code=short_code)

    async def _organizer_name(self, organizer: User) -> str:
        try:
            name = await self.profiles.display_name(organizer.id)
        except ServiceError as err:
            logger.warning(
                "organizer_profile_lookup_failed",
                organizer_id=str(organizer.id),
                code=err.code,
            )
            name = None
        return name or organizer.email or ANONYMOUS_NAME
