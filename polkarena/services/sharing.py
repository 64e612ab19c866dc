from __future__ import annotations

import math
import re
from datetime import datetime

from polkarena.core.config import settings

FALLBACK_ORIGIN = "https://polkarena.montaq.org"
SHARE_PATH = "/e/"

_SHARE_CODE_RE = re.compile(r"/e/([a-z0-9]+)", re.IGNORECASE)


def build_share_url(code: str, base_url: str | None = None) -> str:
    base = (base_url or settings.public_base_url or FALLBACK_ORIGIN).rstrip("/")
    return f"{base}{SHARE_PATH}{code}"


def extract_short_code(url: str) -> str | None:
    match = _SHARE_CODE_RE.search(url)
    return match.group(1) if match else None


def _coerce(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_duration(start: datetime | str, end: datetime | str) -> str:
    """Render ``end - start`` as "1 hour 30 minutes" style text.

    Whole minutes are floored. Negative spans are clamped to zero.
    """
    delta = _coerce(end) - _coerce(start)
    total_minutes = max(0, math.floor(delta.total_seconds() / 60))
    hours, minutes = divmod(total_minutes, 60)

    if hours == 0:
        return _plural(minutes, "minute")
    if minutes == 0:
        return _plural(hours, "hour")
    return f"{_plural(hours, 'hour')} {_plural(minutes, 'minute')}"
