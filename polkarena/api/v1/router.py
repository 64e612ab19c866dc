from fastapi import APIRouter

from polkarena.api.v1.banners import router as banners_router
from polkarena.api.v1.events import router as events_router
from polkarena.api.v1.me import router as me_router

router = APIRouter()
router.include_router(events_router)
router.include_router(banners_router)
router.include_router(me_router)
