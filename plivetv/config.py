"""Runtime settings read from the environment.

A ``.env`` file next to the project root is loaded first (python-dotenv),
so local development only needs that file. Values already present in the
process environment win over the file.

    PLIVETV_PROVIDER_URL          completion backend base URL (empty → echo backend)
    PLIVETV_API_KEY / API_KEY     backend credential
    PLIVETV_PROVIDER_FORMAT       "gemini" | "openai"
    PLIVETV_MODEL                 model identifier
    PLIVETV_TIMEOUT               backend HTTP timeout in seconds
    PLIVETV_CATALOG               path to a series catalog JSON file
    PLIVETV_VISIBILITY_THRESHOLD  visible ratio at which a feed item becomes active
    PLIVETV_INDICATOR_DELAY       seconds the play/pause indicator stays on screen
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ROOT = Path(__file__).parent.parent

_DEFAULTS: dict[str, Any] = {
    "provider_url": "",
    "api_key": "",
    "provider_format": "gemini",
    "model": "gemini-3-flash-preview",
    "timeout": 60.0,
    "catalog_path": None,
    "visibility_threshold": 0.6,
    "indicator_delay": 0.8,
}

_ENV_KEYS: dict[str, str] = {
    "provider_url": "PLIVETV_PROVIDER_URL",
    "api_key": "PLIVETV_API_KEY",
    "provider_format": "PLIVETV_PROVIDER_FORMAT",
    "model": "PLIVETV_MODEL",
    "timeout": "PLIVETV_TIMEOUT",
    "catalog_path": "PLIVETV_CATALOG",
    "visibility_threshold": "PLIVETV_VISIBILITY_THRESHOLD",
    "indicator_delay": "PLIVETV_INDICATOR_DELAY",
}


class Settings(BaseModel):
    provider_url: str = ""
    api_key: str = ""
    provider_format: Literal["gemini", "openai"] = "gemini"
    model: str = "gemini-3-flash-preview"
    timeout: float = Field(60.0, gt=0)
    catalog_path: Path | None = None
    visibility_threshold: float = Field(0.6, gt=0, le=1)
    indicator_delay: float = Field(0.8, ge=0)

    def public(self) -> dict[str, Any]:
        """Settings safe to hand to a client (no credentials)."""
        data = self.model_dump(mode="json", exclude={"api_key"})
        data["has_api_key"] = bool(self.api_key)
        return data


def load_settings(env_file: Path | None = None) -> Settings:
    """Build Settings from defaults overlaid with environment values."""
    load_dotenv(env_file or ROOT / ".env")

    values: dict[str, Any] = dict(_DEFAULTS)
    for field, key in _ENV_KEYS.items():
        raw = os.getenv(key, "")
        if raw:
            values[field] = raw
    # Shared with the web client build, which reads API_KEY
    if not values["api_key"]:
        values["api_key"] = os.getenv("API_KEY", "")
    return Settings.model_validate(values)
