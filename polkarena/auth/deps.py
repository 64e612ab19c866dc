from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from polkarena.core.config import settings
from polkarena.db import get_db
from polkarena.models import User

DBSession = Annotated[AsyncSession, Depends(get_db)]


def _unauthorized(detail: str = "unauthorized") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _get_or_create_dev_user(db: AsyncSession, email: str) -> User:
    user = await db.scalar(select(User).where(User.email == email))
    if user:
        return user

    user = User(email=email, name=None)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # concurrent first request for the same token
        await db.rollback()
        return await db.scalar(select(User).where(User.email == email))
    await db.refresh(user)
    return user


async def get_current_user(request: Request, db: DBSession) -> User:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise _unauthorized("missing bearer token")

    token = auth.removeprefix("Bearer ").strip()

    # Local dev auth only; the hosted auth provider is not wired in here
    if settings.auth_mode == "dev" and settings.env == "local":
        prefix = settings.dev_auth_prefix
        if not token.startswith(prefix):
            raise _unauthorized(f"invalid dev token (expected prefix {prefix})")

        email = token.removeprefix(prefix).strip()
        if "@" not in email:
            raise _unauthorized("invalid email in token")

        return await _get_or_create_dev_user(db, email)

    raise _unauthorized("auth not configured")


CurrentUser = Annotated[User, Depends(get_current_user)]
