from polkarena.services.banner_upload import BannerUploader
from polkarena.services.event_creation import EventCreationController, InFlightGuard, SubmitOutcome
from polkarena.services.shortcodes import generate_short_code, generate_unique_short_code

__all__ = [
    "BannerUploader",
    "EventCreationController",
    "InFlightGuard",
    "SubmitOutcome",
    "generate_short_code",
    "generate_unique_short_code",
]
