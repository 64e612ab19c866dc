from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# upper bound of the Integer participant_limit column
MAX_PARTICIPANT_LIMIT = 2**31 - 1


def _ensure_tzaware(value: datetime | None) -> datetime | None:
    if value is None:
        return value
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise ValueError("datetime must be timezone-aware")
    return value


def _assume_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes for timezone=True columns
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class CustomFieldType(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"


class CustomField(SchemaBase):
    model_config = ConfigDict(from_attributes=True, extra="ignore", frozen=True)

    id: str
    name: str = ""
    type: CustomFieldType = CustomFieldType.TEXT
    required: bool = False
    options: list[str] = Field(default_factory=list)


class EventFormState(SchemaBase):
    """Raw create-event form values, exactly as typed by the organizer."""

    model_config = ConfigDict(from_attributes=True, extra="ignore", frozen=True)

    name: str = ""
    description: str = ""
    start_time: str = ""
    end_time: str = ""
    location: str = ""
    is_online: bool = False
    participant_limit: str = ""
    tags: str = ""
    registration_deadline: str = ""
    website_url: str = ""
    discord_url: str = ""
    twitter_url: str = ""
    requirements: str = ""
    banner_image_url: str = ""
    custom_fields: tuple[CustomField, ...] = ()

    @field_validator("participant_limit", mode="before")
    @classmethod
    def _stringify_limit(cls, value):
        # number inputs arrive as ints from JSON clients
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class EventCreate(SchemaBase):
    name: str
    description: str
    start_time: datetime
    end_time: datetime
    registration_deadline: datetime | None = None
    location: str | None = None
    is_online: bool = False
    participant_limit: int | None = Field(default=None, ge=1, le=MAX_PARTICIPANT_LIMIT)
    tags: list[str] | None = None
    custom_fields: list[CustomField] | None = None
    requirements: str | None = None
    website_url: str | None = None
    discord_url: str | None = None
    twitter_url: str | None = None
    banner_image_url: str | None = None
    short_code: str | None = None

    @field_validator("start_time", "end_time", "registration_deadline", mode="after")
    @classmethod
    def _validate_tzaware(cls, value: datetime | None) -> datetime | None:
        return _ensure_tzaware(value)

    @model_validator(mode="after")
    def _validate_time_bounds(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.registration_deadline and self.registration_deadline >= self.start_time:
            raise ValueError("registration_deadline must be before start_time")
        return self


class EventOut(SchemaBase):
    id: UUID
    name: str
    description: str
    start_time: datetime
    end_time: datetime
    registration_deadline: datetime | None = None
    organizer_id: UUID
    organizer_name: str
    location: str | None = None
    is_online: bool
    participant_limit: int | None = None
    tags: list[str] | None = None
    custom_fields: list[CustomField] | None = None
    requirements: str | None = None
    website_url: str | None = None
    discord_url: str | None = None
    twitter_url: str | None = None
    banner_image_url: str | None = None
    short_code: str | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator(
        "start_time",
        "end_time",
        "registration_deadline",
        "created_at",
        "updated_at",
        mode="after",
    )
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return _assume_utc(value)


class EventDetailOut(EventOut):
    share_url: str | None = None
    banner_url: str | None = None
    duration: str


class EventCreatedOut(EventDetailOut):
    detail_url: str
    short_code_verified: bool
    message: str


class BannerOut(SchemaBase):
    path: str
    url: str
