"""
Application settings.

Provider endpoints come from ``config.json`` (``providers`` maps a name to its
``base_url`` and the ``env_key`` holding its API key). A few values can be
overridden from the environment, and a ``.env`` file next to the working
directory is loaded first.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS: Dict[str, dict] = {
    "gemini": {
        "base_url": "https://generativelanguage.googleapis.com/v1beta/openai",
        "env_key": "GEMINI_API_KEY",
    },
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "env_key": "OPENAI_API_KEY",
    },
}


@dataclass(frozen=True)
class Settings:
    providers: Dict[str, dict] = field(default_factory=lambda: dict(DEFAULT_PROVIDERS))
    provider: str = "gemini"
    model: str = "gemini-2.5-flash"
    storage_path: Path = Path("./drplant_storage.json")
    default_theme: str = "light"
    log_level: str = "INFO"


def load_settings(config_path: str = "config.json") -> Settings:
    load_dotenv(override=False)

    raw: dict = {}
    path = Path(config_path)
    if path.exists():
        try:
            with path.open(encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s, using built-in provider defaults: %s", config_path, e)
            raw = {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring %s: top level is not an object", config_path)
            raw = {}
    else:
        logger.info("No %s found, using built-in provider defaults", config_path)

    providers = raw.get("providers") or dict(DEFAULT_PROVIDERS)
    provider = os.getenv("DRPLANT_PROVIDER") or raw.get("default_provider") or next(iter(providers))
    if provider not in providers:
        raise KeyError(f"Unknown provider {provider!r}; configured: {', '.join(providers)}")

    default_theme = raw.get("default_theme", "light")
    if default_theme not in ("dark", "light"):
        logger.warning("Ignoring default_theme %r", default_theme)
        default_theme = "light"

    return Settings(
        providers=providers,
        provider=provider,
        model=os.getenv("DRPLANT_MODEL") or raw.get("default_model") or Settings.model,
        storage_path=Path(os.getenv("DRPLANT_STORAGE_PATH") or raw.get("storage_path") or Settings.storage_path),
        default_theme=default_theme,
        log_level=os.getenv("DRPLANT_LOG_LEVEL", "INFO").upper(),
    )
