from polkarena.api.v1.schemas.events import (
    BannerOut,
    CustomField,
    CustomFieldType,
    EventCreate,
    EventCreatedOut,
    EventDetailOut,
    EventFormState,
    EventOut,
)

__all__ = [
    "BannerOut",
    "CustomField",
    "CustomFieldType",
    "EventCreate",
    "EventCreatedOut",
    "EventDetailOut",
    "EventFormState",
    "EventOut",
]
