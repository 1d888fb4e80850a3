import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from backend.routes import router
from backend.viewer import Viewer
from plivetv.catalog import load_series
from plivetv.config import Settings, load_settings
from plivetv.llm import CompletionBackend, build_backend

load_dotenv(Path(__file__).parent.parent / ".env")

STATIC_DIR = Path(__file__).parent / "static"

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    backend: CompletionBackend | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    series = load_series(settings.catalog_path)
    viewer = Viewer(settings, series, backend or build_backend(settings))

    app = FastAPI(title="PLIVE TV")
    app.state.viewer = viewer
    app.include_router(router, prefix="/api")

    if STATIC_DIR.exists() and not os.getenv("VITE_DEV", ""):
        # Serve static assets (JS, CSS, etc.)
        app.mount("/assets", StaticFiles(directory=STATIC_DIR / "assets"), name="assets")

        # SPA fallback: all non-API routes serve index.html
        @app.get("/{path:path}")
        async def spa_fallback(path: str):
            return FileResponse(STATIC_DIR / "index.html")

    logger.info("serving %s (%d episodes)", series.title, len(series.episodes))
    return app


# Default app instance for uvicorn (reads PLIVETV_* env vars)
app = create_app()
