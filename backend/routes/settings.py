"""Health check, catalog and settings endpoints."""

from fastapi import APIRouter, Depends

from backend.viewer import Viewer, get_viewer

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/series")
async def get_series(viewer: Viewer = Depends(get_viewer)):
    """The series shown on the landing view: title, characters, episodes."""
    return viewer.series.model_dump()


@router.get("/settings")
async def get_settings(viewer: Viewer = Depends(get_viewer)):
    """Active runtime settings, without credentials."""
    return viewer.settings.public()
