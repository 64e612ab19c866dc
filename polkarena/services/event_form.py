"""Create-event form: pure reducers over :class:`EventFormState` and the
validation pipeline that turns raw form values into an :class:`EventCreate`.

Reducers never mutate their input; each returns a new state. The pipeline runs
its checks in a fixed order and stops at the first failure, raising a
:class:`ValidationError` whose message is meant to be shown to the organizer.
"""
from __future__ import annotations

import time
from datetime import datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import ValidationError as PydanticValidationError

from polkarena.api.v1.schemas.events import (
    MAX_PARTICIPANT_LIMIT,
    CustomField,
    EventCreate,
    EventFormState,
)
from polkarena.core.config import settings
from polkarena.services.error_codes import ErrorCode
from polkarena.services.exceptions import ValidationError

CUSTOM_FIELD_KEY = "custom_fields"


def default_timezone() -> tzinfo:
    name = settings.default_timezone
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


# Reducers


def set_form_value(state: EventFormState, name: str, value: Any) -> EventFormState:
    if name == CUSTOM_FIELD_KEY or name not in EventFormState.model_fields:
        raise KeyError(f"unknown form field: {name}")
    return state.model_copy(update={name: value})


def _next_field_id(state: EventFormState) -> str:
    taken = {field.id for field in state.custom_fields}
    candidate = int(time.time() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def add_custom_field(state: EventFormState, field_id: str | None = None) -> EventFormState:
    field = CustomField(id=field_id or _next_field_id(state))
    return state.model_copy(update={CUSTOM_FIELD_KEY: (*state.custom_fields, field)})


def update_custom_field(state: EventFormState, field_id: str, **changes: Any) -> EventFormState:
    changes.pop("id", None)
    unknown = set(changes) - set(CustomField.model_fields)
    if unknown:
        raise KeyError(f"unknown custom field attribute(s): {', '.join(sorted(unknown))}")

    updated = []
    for field in state.custom_fields:
        if field.id == field_id:
            try:
                field = CustomField.model_validate({**field.model_dump(), **changes})
            except PydanticValidationError as exc:
                raise ValidationError(ErrorCode.INVALID_CUSTOM_FIELD.value, str(exc)) from exc
        updated.append(field)
    return state.model_copy(update={CUSTOM_FIELD_KEY: tuple(updated)})


def remove_custom_field(state: EventFormState, field_id: str) -> EventFormState:
    remaining = tuple(field for field in state.custom_fields if field.id != field_id)
    return state.model_copy(update={CUSTOM_FIELD_KEY: remaining})


# Parsing helpers


def parse_form_timestamp(raw: str, tz: tzinfo | None = None) -> datetime | None:
    """Parse an ISO-8601 form value; naive values are read in ``tz``."""
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        value = datetime.fromisoformat(raw)
        if value.tzinfo is None:
            value = value.replace(tzinfo=tz or default_timezone())
        # offsets near datetime.min/max can overflow when normalised
        return value.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def split_tags(raw: str) -> list[str] | None:
    tags = [tag.strip() for tag in (raw or "").split(",")]
    tags = [tag for tag in tags if tag]
    return tags or None


def _optional_text(value: str) -> str | None:
    value = (value or "").strip()
    return value or None


def _parse_participant_limit(raw: str) -> int | None:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        limit = int(raw)
    except ValueError:
        limit = 0
    if limit < 1 or limit > MAX_PARTICIPANT_LIMIT:
        raise ValidationError(
            ErrorCode.INVALID_PARTICIPANT_LIMIT.value,
            "Maximum participants must be a positive whole number",
        )
    return limit


# Pipeline


def validate_event_form(
    state: EventFormState,
    *,
    now: datetime,
    tz: tzinfo | None = None,
) -> EventCreate:
    tz = tz or default_timezone()

    name = state.name.strip()
    description = state.description.strip()
    if not name or not description or not state.start_time.strip() or not state.end_time.strip():
        raise ValidationError(
            ErrorCode.REQUIRED_FIELDS_MISSING.value, "Please fill in all required fields"
        )

    start_time = parse_form_timestamp(state.start_time, tz)
    end_time = parse_form_timestamp(state.end_time, tz)
    if start_time is None or end_time is None:
        raise ValidationError(
            ErrorCode.INVALID_EVENT_TIMES.value, "Please enter valid start and end times"
        )

    if start_time < now:
        raise ValidationError(ErrorCode.START_IN_PAST.value, "Start time cannot be in the past")

    if end_time <= start_time:
        raise ValidationError(ErrorCode.END_BEFORE_START.value, "End time must be after start time")

    registration_deadline = None
    if state.registration_deadline.strip():
        registration_deadline = parse_form_timestamp(state.registration_deadline, tz)
        if registration_deadline is None:
            raise ValidationError(
                ErrorCode.INVALID_REGISTRATION_DEADLINE.value,
                "Please enter a valid registration deadline",
            )
        if registration_deadline >= start_time:
            raise ValidationError(
                ErrorCode.DEADLINE_NOT_BEFORE_START.value,
                "Registration deadline must be before start time",
            )
        if registration_deadline < now:
            raise ValidationError(
                ErrorCode.DEADLINE_IN_PAST.value, "Registration deadline cannot be in the past"
            )

    participant_limit = _parse_participant_limit(state.participant_limit)

    return EventCreate(
        name=name,
        description=description,
        start_time=start_time,
        end_time=end_time,
        registration_deadline=registration_deadline,
        location=_optional_text(state.location),
        is_online=state.is_online,
        participant_limit=participant_limit,
        tags=split_tags(state.tags),
        custom_fields=list(state.custom_fields) or None,
        requirements=_optional_text(state.requirements),
        website_url=_optional_text(state.website_url),
        discord_url=_optional_text(state.discord_url),
        twitter_url=_optional_text(state.twitter_url),
        banner_image_url=_optional_text(state.banner_image_url),
    )
