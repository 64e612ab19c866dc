"""Short codes for shareable event links.

A short code is seven characters drawn from an alphabet without the
look-alike characters ``0``, ``1``, ``i``, ``l`` and ``o``. When an event name
is supplied its first two or three alphanumerics become the prefix so the link
stays recognisable (``"Polkadot Meetup"`` -> ``"pol3x9k"`` style codes).

Uniqueness is best effort: :func:`generate_unique_short_code` asks a lookup
collaborator whether a candidate is free, and after ``max_attempts`` misses it
returns an *unverified* code. The events table carries a unique index, so the
insert is what finally enforces the constraint.
"""
from __future__ import annotations

import random
import re
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

import structlog

from polkarena.services.error_codes import ErrorCode
from polkarena.services.exceptions import ShortCodeLookupError

logger = structlog.get_logger()

ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"
SHORT_CODE_LENGTH = 7
MAX_PREFIX_LENGTH = 3
MIN_PREFIX_LENGTH = 2
DEFAULT_MAX_ATTEMPTS = 10

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


class LookupOutcome(str, Enum):
    AVAILABLE = "available"
    TAKEN = "taken"
    FAILED = "failed"


class LookupErrorPolicy(str, Enum):
    RETRY = "retry"
    ABORT = "abort"


ShortCodeLookup = Callable[[str], Awaitable[LookupOutcome]]


@dataclass(frozen=True)
class ShortCodePolicy:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    on_lookup_error: LookupErrorPolicy = LookupErrorPolicy.RETRY

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")


@dataclass(frozen=True)
class ShortCodeResult:
    code: str
    verified: bool
    attempts: int


def short_code_prefix(seed_name: str | None) -> str:
    if not seed_name:
        return ""
    prefix = _NON_ALNUM_RE.sub("", seed_name.lower())[:MAX_PREFIX_LENGTH]
    return prefix if len(prefix) >= MIN_PREFIX_LENGTH else ""


def generate_short_code(
    seed_name: str | None = None,
    *,
    length: int = SHORT_CODE_LENGTH,
    rng: random.Random | None = None,
) -> str:
    choice = rng.choice if rng is not None else secrets.choice
    result = short_code_prefix(seed_name)
    while len(result) < length:
        result += choice(ALPHABET)
    return result


async def generate_unique_short_code(
    seed_name: str | None,
    lookup: ShortCodeLookup,
    policy: ShortCodePolicy | None = None,
    *,
    rng: random.Random | None = None,
) -> ShortCodeResult:
    policy = policy or ShortCodePolicy()

    for attempt in range(1, policy.max_attempts + 1):
        code = generate_short_code(seed_name, rng=rng)
        outcome = await lookup(code)

        if outcome == LookupOutcome.AVAILABLE:
            return ShortCodeResult(code=code, verified=True, attempts=attempt)

        if outcome == LookupOutcome.FAILED:
            logger.warning("short_code_lookup_failed", attempt=attempt, policy=policy.on_lookup_error.value)
            if policy.on_lookup_error == LookupErrorPolicy.ABORT:
                raise ShortCodeLookupError(
                    ErrorCode.SHORT_CODE_LOOKUP_FAILED.value,
                    "Could not check short code availability",
                )

    code = generate_short_code(rng=rng)
    logger.warning("short_code_unverified_fallback", attempts=policy.max_attempts)
    return ShortCodeResult(code=code, verified=False, attempts=policy.max_attempts)
