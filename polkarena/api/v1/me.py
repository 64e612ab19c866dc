from fastapi import APIRouter
from pydantic import BaseModel

from polkarena.auth.deps import CurrentUser

router = APIRouter(prefix="/me", tags=["me"])


class MeOut(BaseModel):
    user_id: str
    email: str | None
    name: str | None
    display_name: str


@router.get("", response_model=MeOut)
async def me(user: CurrentUser):
    return MeOut(
        user_id=str(user.id),
        email=user.email,
        name=user.name,
        display_name=user.display_name,
    )
