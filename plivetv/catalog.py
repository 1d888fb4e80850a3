"""Series catalog loading.

The catalog is static configuration: one JSON file describing a series,
its characters and its episodes. A copy of the "Heart Beats" catalog ships
with the package and is used when no path is configured.

Image URLs carrying a version key (``thumbnail_version``,
``avatar_version``) are rewritten through the weserv thumbnailing proxy so
the browser gets CORS-safe, resized, cache-busted images.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from plivetv.models import Series

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = Path(__file__).parent / "data" / "heart_beats.json"

IMAGE_PROXY = "https://images.weserv.nl/"
AVATAR_SIZE = 400
THUMBNAIL_SIZE = 1000


class CatalogError(ValueError):
    """Raised when a catalog file is missing or does not describe a valid series."""


def smart_image_url(url: str, version: str = "1", width: int = 800, height: int = 800) -> str:
    """Route an image URL through the thumbnailing proxy.

    Bumping ``version`` changes the ``t`` parameter and forces a cache refresh.
    """
    if not url:
        return ""
    return (
        f"{IMAGE_PROXY}?url={quote(url, safe='')}"
        f"&w={width}&h={height}&fit=cover&output=jpg&n=-1&t={version}"
    )


def _rewrite_images(raw: dict[str, Any]) -> dict[str, Any]:
    data = dict(raw)
    version = data.pop("thumbnail_version", None)
    if version is not None:
        data["thumbnail_url"] = smart_image_url(
            data.get("thumbnail_url", ""), str(version), THUMBNAIL_SIZE, THUMBNAIL_SIZE,
        )

    characters = []
    for char in data.get("characters", []):
        char = dict(char)
        version = char.pop("avatar_version", None)
        if version is not None:
            char["avatar_url"] = smart_image_url(
                char.get("avatar_url", ""), str(version), AVATAR_SIZE, AVATAR_SIZE,
            )
        characters.append(char)
    data["characters"] = characters
    return data


def parse_series(raw: dict[str, Any]) -> Series:
    """Validate a decoded catalog dict into a Series."""
    if not isinstance(raw, dict):
        raise CatalogError(f"Catalog must be a JSON object, got {type(raw).__name__}")
    try:
        return Series.model_validate(_rewrite_images(raw))
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog: {e}") from e


def load_series(path: Path | None = None) -> Series:
    """Load and validate a catalog file (the bundled one when path is None)."""
    path = path or DEFAULT_CATALOG
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog not found: {path}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {path} is not valid JSON: {e}") from e

    series = parse_series(raw)
    logger.debug(
        "loaded series %s from %s (%d episodes, %d characters)",
        series.id, path, len(series.episodes), len(series.characters),
    )
    return series
