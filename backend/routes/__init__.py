"""FastAPI API endpoints under /api.

Endpoint groups: health/series/settings, feed (view lifecycle, viewport
observations, player events, gestures, story branches) and chat (overlay
session). All state lives in the app's Viewer; nothing is persisted.
"""

from fastapi import APIRouter

from .chat import router as chat_router
from .feed import router as feed_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(feed_router)
router.include_router(chat_router)
